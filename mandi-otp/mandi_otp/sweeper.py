"""
Expiry Sweeper
==============
Background task that evicts expired entries from every OTP store.
"""

import asyncio
import contextlib
from typing import Dict, Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


class Sweepable(Protocol):
    async def sweep_expired(self) -> int:
        ...


class ExpirySweeper:
    """
    Runs ``sweep_expired()`` on each registered store every ``interval``
    seconds, independently of request handling.
    """

    def __init__(self, stores: Dict[str, Sweepable], interval: float = 60.0):
        self.stores = dict(stores)
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="otp-expiry-sweeper")
        logger.info("sweeper_started", interval=self.interval, stores=list(self.stores))

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("sweeper_stopped")

    async def sweep_once(self) -> Dict[str, int]:
        """Sweep every store once. Returns removed counts by store name."""
        removed = {}
        for name, store in self.stores.items():
            removed[name] = await store.sweep_expired()
        if any(removed.values()):
            logger.debug("sweep_completed", removed=removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("sweep_failed")
