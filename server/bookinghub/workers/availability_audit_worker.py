"""Background worker reporting stale property availability flags."""

import logging
from datetime import date

from ..core.database import Database
from ..core.observability import metrics_collector
from ..services.availability_service import AvailabilityService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class AvailabilityAuditWorker(BaseWorker):
    """
    Background worker that finds properties left unavailable after their
    assignments have ended.

    It only reports, through the log and the
    ``properties_stale_unavailable`` gauge. Releasing a property stays a
    manual decision.
    """

    def __init__(self, database: Database, interval_seconds: int = 3600):
        """
        Initialize the availability audit worker.

        Args:
            database: Database to audit
            interval_seconds: How often to run the audit (default: 1 hour)
        """
        super().__init__(name="AvailabilityAudit", interval_seconds=interval_seconds)
        self.database = database

    async def process(self) -> int:
        """Run one audit, returning the number of stale properties found."""
        today = date.today()

        async with self.database.session_factory() as db:
            stale = await AvailabilityService(db).find_stale_unavailable(today)

        metrics_collector.set_stale_unavailable_properties(len(stale))

        if stale:
            logger.warning(
                f"Found {len(stale)} unavailable properties with no current assignment",
                extra={
                    "stale_count": len(stale),
                    "property_ids": [str(p.id) for p in stale],
                    "as_of": today.isoformat(),
                    "worker": self.name,
                }
            )

        return len(stale)
