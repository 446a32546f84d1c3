"""Background workers for the booking hub."""

from .availability_audit_worker import AvailabilityAuditWorker
from .manager import WorkerManager

__all__ = ["AvailabilityAuditWorker", "WorkerManager"]
