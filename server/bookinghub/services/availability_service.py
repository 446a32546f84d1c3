"""Read-only checks on property availability flags."""

import logging
from datetime import date

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.assignment import Assignment
from ..models.property import Property

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Reports on the availability flag set by assignment.

    The flag is never flipped back here. A property whose assignments have
    all ended stays unavailable until someone releases it by hand.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_stale_unavailable(self, today: date) -> list[Property]:
        """Unavailable properties with no assignment ending on or after ``today``."""
        current_assignment = exists().where(
            Assignment.property_id == Property.id,
            Assignment.end_date >= today
        )
        stmt = (
            select(Property)
            .where(Property.is_available.is_(False), ~current_assignment)
            .order_by(Property.property_name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())
