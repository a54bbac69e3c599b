from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models._mixins import TimestampMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled")


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'confirmed', 'cancelled')", name="ck_bookings_status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes

    # Canonical "HH:MM-HH:MM" keys, chronological
    selected_timeslots: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # {"HH:MM-HH:MM": [kart_id, ...]}
    timeslot_kart_selections: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # {"HH:MM-HH:MM": {kart_id: quantity}}
    timeslot_kart_quantities: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    kart_selections: Mapped[list["BookingKartSelection"]] = relationship(
        "BookingKartSelection",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingKartSelection.position",
    )


class BookingKartSelection(Base):
    __tablename__ = "booking_kart_selections"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_booking_kart_selections_quantity_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id: Mapped[str] = mapped_column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    # Not a foreign key: bookings keep their history when a kart is deleted
    kart_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_slot: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    timeslot: Mapped[str | None] = mapped_column(String(11), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    booking: Mapped[Booking] = relationship("Booking", back_populates="kart_selections")


class BookingDayLock(Base):
    """One row per booking date; bumped to serialize creations on that date."""

    __tablename__ = "booking_day_locks"

    day: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
