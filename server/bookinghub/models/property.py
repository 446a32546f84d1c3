"""Property model definition."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Property(Base):
    """A rentable unit. ``price`` is the charge per day in major currency units."""

    __tablename__ = "properties"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    landlord_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("landlord.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    property_name: Mapped[str] = mapped_column(String(255), nullable=False)
    property_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    full_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    postcode: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Cleared on assignment; nothing in this service sets it back
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_property_price_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, name='{self.property_name}', "
            f"price={self.price}, is_available={self.is_available})>"
        )
