"""API test fixtures — FastAPI app with a test agent on app.state.

Invariants:
    - The lifespan is not run: no YAML, Discord or database at startup
    - app.state is restored after every test
"""

import pytest
from httpx import ASGITransport, AsyncClient

from nudge.main import app
from nudge.services.notification_agent import NotificationAgent
from tests.services.mock_messaging import FakeClock, FakeMessagingClient, make_config


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def messaging():
    return FakeMessagingClient()


@pytest.fixture
def agent(messaging, clock):
    a = NotificationAgent(make_config(max_pending_per_user=2), messaging, clock=clock)
    a.initialize()
    return a


@pytest.fixture
async def client(agent):
    app.state.agent = agent
    app.state.event_log = None
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.state.agent = None
    app.state.event_log = None
