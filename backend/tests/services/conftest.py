"""Service test fixtures — agent wired to in-memory messaging and a fake clock.

Invariants:
    - Every test gets a fresh store, clock and messaging client
    - make_agent builds variants (overridden policy, runner, recorder)
"""

import pytest

from nudge.services.notification_agent import NotificationAgent
from tests.services.mock_messaging import FakeClock, FakeMessagingClient, make_config


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def messaging():
    return FakeMessagingClient()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def make_agent(messaging, clock):
    def _make(runner=None, recorder=None, **config_overrides):
        agent = NotificationAgent(
            make_config(**config_overrides), messaging, recorder=recorder, clock=clock,
        )
        agent.initialize(runner)
        return agent
    return _make


@pytest.fixture
def agent(make_agent):
    return make_agent()
