"""Booking request and requested date range models."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .identity import Contractor


class BookingDateStatus(str, Enum):
    """Status of a requested date range."""
    PENDING = "pending"
    CONFIRMED = "confirmed"


class BookingRequest(Base):
    """A contractor's request for accommodation over one or more date ranges."""

    __tablename__ = "booking_requests"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("contractor.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    project_postcode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    budget_per_person_week: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("team_size IS NULL OR team_size >= 0", name="ck_booking_request_team_size_non_negative"),
    )

    contractor: Mapped["Contractor"] = relationship("Contractor")
    dates: Mapped[list["BookingDate"]] = relationship(
        "BookingDate",
        back_populates="booking_request",
        cascade="all, delete-orphan",
        order_by="BookingDate.start_date"
    )

    def __repr__(self) -> str:
        return f"<BookingRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"


class BookingDate(Base):
    """One contiguous interval requested within a booking request."""

    __tablename__ = "booking_dates"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    booking_request_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("booking_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingDateStatus.PENDING.value,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_booking_date_start_before_end"),
    )

    booking_request: Mapped["BookingRequest"] = relationship("BookingRequest", back_populates="dates")

    def __repr__(self) -> str:
        return (
            f"<BookingDate(id={self.id}, {self.start_date}..{self.end_date}, "
            f"status={self.status})>"
        )
