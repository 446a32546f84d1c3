"""Booking and invoice model definitions."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .property import Property


class BookingSource(str, Enum):
    """How a booking came to exist."""
    DIRECT = "direct"
    ASSIGNMENT = "assignment"


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    PAID = "paid"


class InvoiceStatus(str, Enum):
    """Invoice status enumeration."""
    UNPAID = "unpaid"
    PAID = "paid"


class Booking(Base):
    """
    A payable stay at one property.

    ``source`` tells the two origins apart: ``direct`` bookings are created by
    a contractor for a property, ``assignment`` bookings are created alongside
    a property assignment and point back to it through ``assignment_id``.
    """

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    source: Mapped[BookingSource] = mapped_column(String(20), nullable=False, index=True)

    property_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    contractor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("contractor.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    assignment_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("booked_properties.id", ondelete="CASCADE"),
        nullable=True,
        unique=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING.value,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_booking_start_not_after_end"),
        CheckConstraint(
            "(source = 'assignment') = (assignment_id IS NOT NULL)",
            name="ck_booking_assignment_matches_source"
        ),
    )

    property: Mapped["Property"] = relationship("Property")
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Invoice.created_at"
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, source={self.source}, property_id={self.property_id}, "
            f"{self.start_date}..{self.end_date}, status={self.status})>"
        )


class Invoice(Base):
    """Invoice backing one checkout session. Only a verified callback marks it paid."""

    __tablename__ = "invoices"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    stripe_session_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    stripe_payment_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.UNPAID.value,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_invoice_amount_non_negative"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="invoices")

    def __repr__(self) -> str:
        return (
            f"<Invoice(id={self.id}, booking_id={self.booking_id}, "
            f"session='{self.stripe_session_id}', status={self.status})>"
        )
