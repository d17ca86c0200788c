"""Background cleanup of expired short URLs."""

import asyncio
import logging
from typing import Optional

from .service import URLShortenerService


class ExpiredURLSweeper:
    """Periodically deletes expired short URLs.

    Each run is one bulk DELETE bounded by ``timeout_seconds``. A failed run is
    logged and the loop waits for the next tick; nothing is retried in between.
    Stopping is cooperative: the stop request is noticed between runs, so an
    in-flight DELETE always completes.
    """

    def __init__(
        self,
        service: URLShortenerService,
        interval_seconds: float = 3600,
        timeout_seconds: float = 30,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize sweeper.

        Args:
            service: Service whose store is swept
            interval_seconds: Time between runs
            timeout_seconds: Bound on a single run
            logger: Optional logger
        """
        self.service = service
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> None:
        """Start the background sweep task."""
        if self.running:
            return

        self._stop_event = asyncio.Event()
        self.task = asyncio.create_task(self._sweep_loop())
        self.logger.info(f"Cleanup worker started (interval: {self.interval_seconds}s)")

    async def stop(self, grace_seconds: Optional[float] = None) -> None:
        """Ask the sweep task to exit and wait for it.

        Args:
            grace_seconds: How long to wait before cancelling outright
                (defaults to the run timeout)
        """
        if self.task is None:
            return

        task = self.task
        self._stop_event.set()
        try:
            # asyncio.wait does not raise if the sweep task itself was cancelled
            done, _ = await asyncio.wait({task}, timeout=grace_seconds or self.timeout_seconds)
            if not done:
                self.logger.warning("Cleanup worker did not stop in time, cancelling")
                task.cancel()
                await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            self.task = None

        self.logger.info("Cleanup worker stopped")

    async def run_once(self) -> Optional[int]:
        """Run one sweep.

        Returns:
            Number of deleted records, or None if the run failed
        """
        try:
            deleted = await asyncio.wait_for(self.service.cleanup_expired(), self.timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.error(f"Cleanup timed out after {self.timeout_seconds}s")
            return None
        except Exception as e:
            self.logger.error(f"Cleanup failed: {e!r}")
            return None

        if deleted > 0:
            self.logger.info(f"Cleanup completed: deleted {deleted} expired URLs")
        else:
            self.logger.debug("Cleanup completed: no expired URLs")
        return deleted

    async def _sweep_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), self.interval_seconds)
            except asyncio.TimeoutError:
                await self.run_once()
