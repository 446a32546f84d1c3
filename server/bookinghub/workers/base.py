"""Base worker class for periodic background jobs."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """
    Abstract base class for background workers.

    Runs ``process()`` every ``interval_seconds`` on the event loop and keeps
    a small record of the last run so the manager can report on it.
    """

    def __init__(self, name: str, interval_seconds: int = 60):
        """
        Initialize the worker.

        Args:
            name: Worker name for logging
            interval_seconds: Seconds between the starts of two runs
        """
        self.name = name
        self.interval_seconds = interval_seconds
        self.runs = 0
        self.last_run_at: Optional[datetime] = None
        self.last_result: Any = None
        self.last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @abstractmethod
    async def process(self) -> Any:
        """Run one iteration; the return value is kept as ``last_result``."""

    async def run_once(self) -> Any:
        """Run a single iteration and record its outcome."""
        started = time.monotonic()
        self.last_run_at = datetime.now(timezone.utc)

        try:
            self.last_result = await self.process()
            self.last_error = None
        except Exception as e:
            self.last_error = str(e)
            raise
        finally:
            self.runs += 1

        logger.info(
            f"{self.name} worker iteration completed",
            extra={
                "worker": self.name,
                "duration_seconds": round(time.monotonic() - started, 3),
                "result": self.last_result,
            }
        )
        return self.last_result

    async def start(self) -> None:
        """Start the worker loop."""
        if self.running:
            logger.warning(f"{self.name} worker is already running")
            return

        self._task = asyncio.create_task(self._run(), name=f"worker:{self.name}")
        logger.info(f"{self.name} worker started with {self.interval_seconds}s interval")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if not self.running:
            logger.warning(f"{self.name} worker is not running")
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

        self._task = None
        logger.info(f"{self.name} worker stopped")

    def status(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "interval_seconds": self.interval_seconds,
            "runs": self.runs,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_result": self.last_result,
            "last_error": self.last_error,
        }

    async def _run(self) -> None:
        while True:
            started = time.monotonic()
            try:
                await self.run_once()
            except Exception:
                # A failed run is recorded; the next one still happens on schedule
                logger.error(f"{self.name} worker error", exc_info=True, extra={"worker": self.name})

            await asyncio.sleep(max(0.0, self.interval_seconds - (time.monotonic() - started)))
