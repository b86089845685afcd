"""Expiry Sweeper — runs NotificationAgent.check_expirations on a fixed cadence.

Invariants:
    - One asyncio task per sweeper; start() is a no-op while running
    - A failing pass is logged and the loop continues
    - stop() cancels the task and waits for it to finish
"""

import asyncio
import contextlib
import logging

from nudge.services.notification_agent import NotificationAgent

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodic background sweep of expired pending notifications."""

    def __init__(self, agent: NotificationAgent, interval_seconds: float = 5.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._agent = agent
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="nudge-expiry-sweeper")
        logger.info(f"Expiry sweeper started (every {self._interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Expiry sweeper stopped")

    async def run_once(self) -> int:
        """One sweep pass. Returns how many notifications expired."""
        expired = await self._agent.check_expirations()
        return len(expired)

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Expiry sweep failed: {e}", exc_info=True)
            await asyncio.sleep(self._interval_seconds)
