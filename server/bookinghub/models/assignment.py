"""Property assignment (booked property) model definition."""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking_request import BookingRequest
    from .property import Property


class Assignment(Base):
    """
    Binding of one property to one requested date range.

    Contractor, landlord and property display fields are copied onto the row
    so listings need no joins. For a given property no two assignments may
    have overlapping inclusive intervals; that is enforced by the assignment
    service while it holds the property's lock. ``booking_date_id`` is unique.
    """

    __tablename__ = "booked_properties"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    booking_date_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("booking_dates.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )
    booking_request_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("booking_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    property_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Best-effort lookups, null when no match was found
    contractor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("contractor.id", ondelete="SET NULL"),
        nullable=True
    )
    landlord_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("landlord.id", ondelete="SET NULL"),
        nullable=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    project_postcode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contractor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contractor_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    contractor_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    property_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    property_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    property_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    landlord_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    landlord_contact: Mapped[str | None] = mapped_column(String(320), nullable=True)
    value: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_assignment_start_not_after_end"),
    )

    property: Mapped["Property"] = relationship("Property")
    booking_request: Mapped["BookingRequest | None"] = relationship("BookingRequest")

    def __repr__(self) -> str:
        return (
            f"<Assignment(id={self.id}, property_id={self.property_id}, "
            f"booking_date_id={self.booking_date_id}, {self.start_date}..{self.end_date})>"
        )
