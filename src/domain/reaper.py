"""
Expiry reaper - periodic deletion of codes past their TTL.

The reaper is an explicitly owned asyncio task. The application lifespan
starts it after the store is ready and stops it before the pool closes.
Sweeps are idempotent, so no overlap guard is needed and a failed sweep
is simply retried on the next tick.
"""

import asyncio
import logging

from .ports import Clock, CodeStore, SystemClock, to_millis

logger = logging.getLogger(__name__)


class ExpiryReaper:
    """Deletes codes older than the TTL on a fixed interval."""

    def __init__(
        self,
        store: CodeStore,
        ttl_seconds: int,
        interval_seconds: float,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._ttl_ms = ttl_seconds * 1000
        self._interval = interval_seconds
        self._clock = clock or SystemClock()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="expiry-reaper")
        logger.info("Expiry reaper started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish. No-op if not running."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Expiry reaper stopped")

    async def sweep(self) -> int:
        """
        Run one sweep now.

        Returns:
            Number of deleted records (0 when the sweep failed)
        """
        cutoff = to_millis(self._clock.now()) - self._ttl_ms
        try:
            deleted = await self._store.purge_older_than(cutoff)
        except Exception:
            logger.exception("Expiry sweep failed; retrying next tick")
            return 0

        if deleted:
            logger.info("Expiry sweep removed %d code(s)", deleted)
        else:
            logger.debug("Expiry sweep found nothing to remove")
        return deleted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.sweep()
