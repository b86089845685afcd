"""Tests for ExpirySweeper — periodic sweep task lifecycle."""

import asyncio

import pytest

from nudge.core.notification_context import NotificationContext
from nudge.core.pending import PendingNotification
from nudge.services.expiry_sweeper import ExpirySweeper


def _expired_record(clock, user_id="U1"):
    return PendingNotification(
        user_id=user_id, notification_type="match_queue",
        context=NotificationContext(), expires_at=clock.now_ms - 1,
        message_id="m", sent_at=0, tier=0,
    )


def test_interval_must_be_positive(agent):
    with pytest.raises(ValueError):
        ExpirySweeper(agent, interval_seconds=0)


async def test_run_once_returns_expired_count(agent, clock):
    agent.store.put(_expired_record(clock, "U1"))
    agent.store.put(_expired_record(clock, "U2"))
    assert await ExpirySweeper(agent).run_once() == 2
    assert await ExpirySweeper(agent).run_once() == 0


async def test_background_task_sweeps_and_stops(agent, clock):
    sweeper = ExpirySweeper(agent, interval_seconds=0.01)
    sweeper.start()
    sweeper.start()
    assert sweeper.running

    agent.store.put(_expired_record(clock))
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert not sweeper.running
    assert len(agent.store) == 0


async def test_failing_pass_does_not_stop_loop():
    class FlakyAgent:
        def __init__(self):
            self.calls = 0

        async def check_expirations(self):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("store exploded")
            return []

    flaky = FlakyAgent()
    sweeper = ExpirySweeper(flaky, interval_seconds=0.01)
    sweeper.start()
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert flaky.calls >= 2


async def test_stop_without_start_is_noop(agent):
    await ExpirySweeper(agent).stop()
