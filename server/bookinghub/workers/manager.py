"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Any, Dict

from ..core.config import Settings
from ..core.database import Database
from .availability_audit_worker import AvailabilityAuditWorker
from .base import BaseWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Workers are registered from settings at construction time and started and
    stopped together by the application lifespan.
    """

    def __init__(self, database: Database, settings: Settings):
        self.workers: Dict[str, BaseWorker] = {}
        self._setup_workers(database, settings)

    def _setup_workers(self, database: Database, settings: Settings) -> None:
        """Register the workers enabled by ``settings``."""
        if settings.availability_audit_interval_seconds > 0:
            self.workers["availability_audit"] = AvailabilityAuditWorker(
                database,
                interval_seconds=settings.availability_audit_interval_seconds
            )

        logger.info(f"Initialized {len(self.workers)} workers", extra={"workers": list(self.workers)})

    async def start_all(self) -> None:
        """Start all workers."""
        for name, worker in self.workers.items():
            await worker.start()
            logger.info(f"Started worker: {name}")

    async def stop_all(self) -> None:
        """Stop all running workers concurrently."""
        names = [name for name, worker in self.workers.items() if worker.running]
        results = await asyncio.gather(
            *(self.workers[name].stop() for name in names),
            return_exceptions=True
        )

        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {result}")
            else:
                logger.info(f"Stopped worker: {name}")

    def get_worker(self, name: str) -> BaseWorker:
        """
        Get a specific worker by name.

        Raises:
            KeyError: If worker not found
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, Dict[str, Any]]:
        return {name: worker.status() for name, worker in self.workers.items()}
