"""Periodic store maintenance.

Runs a background task that deletes expired action locks on a fixed
interval. Handles lifecycle (start/shutdown) and keeps going after a failed
sweep.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from modwarden.database.db_maintenance import MaintenanceOperations
from modwarden.util.logger import get_logger

logger = get_logger("maintenance_scheduler")


class MaintenanceScheduler:
    """
    Background sweeper for expired action locks.

    Args:
        maintenance: Maintenance operations bound to the shared store.
        get_interval: Callable returning the interval in seconds (called at start).
    """

    def __init__(
        self,
        maintenance: MaintenanceOperations,
        get_interval: Callable[[], float],
    ) -> None:
        self._maintenance = maintenance
        self._get_interval = get_interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Run one sweep; returns the number of purged locks (-1 on failure)."""
        return await self._maintenance.purge_expired_locks()

    async def _run_loop(self, interval: float) -> None:
        """Infinite loop: sweep, sleep, repeat."""
        logger.info("[MAINTENANCE] Starting lock sweep (interval=%.1fs)", interval)
        try:
            while True:
                await self.run_once()
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.info("[MAINTENANCE] Lock sweep cancelled")
            raise

    def start(self) -> None:
        """Start the background sweep task if not already running."""
        if self.running:
            logger.warning("[MAINTENANCE] Lock sweep already running")
            return
        self._task = asyncio.create_task(self._run_loop(self._get_interval()), name="modwarden-lock-sweep")

    async def shutdown(self) -> None:
        """Stop the sweep task."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        logger.info("[MAINTENANCE] Scheduler shutdown complete")
