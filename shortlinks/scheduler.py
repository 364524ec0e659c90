"""Periodic cleanup of expired short URLs."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional


CleanupAction = Callable[[], Awaitable[Dict[str, int]]]


class CleanupScheduler:
    """Runs a cleanup action on a fixed interval as a cancellable asyncio task.

    Started and stopped by the application lifespan.
    """

    def __init__(
        self,
        cleanup: CleanupAction,
        interval_seconds: float = 300.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize scheduler.

        Args:
            cleanup: Async callable returning a dict with removedCount
            interval_seconds: Delay between runs
            logger: Optional logger
        """
        self.cleanup = cleanup
        self.interval_seconds = interval_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.running:
            return
        self.task = asyncio.create_task(self._loop())
        self.logger.info(f"Started cleanup scheduler (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if not self.task:
            return

        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None
        self.logger.info("Stopped cleanup scheduler")

    async def run_once(self) -> int:
        """Run one cleanup pass; errors are logged, never raised.

        Returns:
            Number of URLs removed
        """
        try:
            result = await self.cleanup()
            removed = result.get("removedCount", 0)
        except Exception as e:
            self.logger.error(f"Scheduled cleanup error: {e}", exc_info=True)
            removed = 0
        self.runs += 1
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.logger.info("Running scheduled cleanup")
            removed = await self.run_once()
            self.logger.info(f"Scheduled cleanup done: {removed} URLs removed")
