from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.models.booking import Booking, BookingDayLock, BookingKartSelection
from app.models.kart import Kart
from app.models.settings import AppSettings
from app.services import errors
from app.services.booking_builder import BookingDraft, compute_total_price
from app.services.errors import BookingInputError, BookingNotFound, BookingRejected, KartNotFound
from app.services.settings_service import get_or_create_settings
from app.services.timeslot_key import InvalidTimeslotKey, canonical_timeslot_key

logger = logging.getLogger(__name__)

_CUSTOMER_FIELDS = ("customer_name", "customer_email", "customer_phone", "notes")


class BookingGateway:
    """Transactional boundary for booking records.

    Writes are committed before the notifier runs; a failing notifier is
    logged and leaves ``email_sent`` false, the booking stays stored.
    """

    def __init__(self, db: Session, notifier=None):
        self.db = db
        self.notifier = notifier

    # Reads

    def lock_day(self, day: date) -> None:
        """Take the per-date lock row for the rest of the current transaction."""
        bump = update(BookingDayLock).where(BookingDayLock.day == day).values(version=BookingDayLock.version + 1)
        if self.db.execute(bump).rowcount:
            return
        try:
            with self.db.begin_nested():
                self.db.add(BookingDayLock(day=day, version=1))
        except IntegrityError:
            # created concurrently; the update now waits for that transaction
            self.db.execute(bump)

    def active_karts(self) -> list[Kart]:
        return list(self.db.execute(select(Kart).where(Kart.is_active == True).order_by(Kart.name)).scalars().all())

    def day_bookings(self, day: date) -> list[Booking]:
        q = (
            select(Booking)
            .options(selectinload(Booking.kart_selections))
            .where(Booking.date == day, Booking.status != "cancelled")
        )
        return list(self.db.execute(q).scalars().all())

    def get(self, booking_id: str) -> Booking:
        booking = self.db.get(Booking, booking_id, options=[selectinload(Booking.kart_selections)])
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def list(self, *, start_date: date | None = None, end_date: date | None = None, status: str | None = None) -> list[Booking]:
        q = select(Booking).options(selectinload(Booking.kart_selections))
        if start_date:
            q = q.where(Booking.date >= start_date)
        if end_date:
            q = q.where(Booking.date <= end_date)
        if status:
            q = q.where(Booking.status == status)
        q = q.order_by(Booking.date.asc(), Booking.start_time.asc())
        return list(self.db.execute(q).scalars().all())

    # Writes

    def create(self, draft: BookingDraft) -> Booking:
        # read before the commit so no transaction is open while mail is sent
        settings_row = get_or_create_settings(self.db)
        booking = Booking(
            customer_name=draft.customer.name,
            customer_email=draft.customer.email,
            customer_phone=draft.customer.phone,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            duration=draft.duration,
            selected_timeslots=list(draft.selected_timeslots),
            timeslot_kart_selections=dict(draft.timeslot_kart_selections),
            timeslot_kart_quantities=dict(draft.timeslot_kart_quantities),
            total_price=draft.total_price,
            status=draft.status,
            notes=draft.notes,
            email_sent=False,
        )
        booking.kart_selections = [
            BookingKartSelection(
                kart_id=sel.kart_id,
                quantity=sel.quantity,
                price_per_slot=sel.price_per_slot,
                timeslot=sel.timeslot,
                position=i,
            )
            for i, sel in enumerate(draft.selections)
        ]
        self.db.add(booking)
        self.db.commit()
        logger.info(
            "Booking %s created for %s %s (%s), total %s",
            booking.id, booking.date.isoformat(), booking.start_time, ", ".join(booking.selected_timeslots), booking.total_price,
        )

        self._send_confirmation(booking, settings_row)
        return booking

    def update(self, booking_id: str, patch: dict[str, Any]) -> Booking:
        settings_row = get_or_create_settings(self.db)
        booking = self.get(booking_id)
        previous_status = booking.status

        for field in _CUSTOMER_FIELDS:
            if patch.get(field) is not None:
                setattr(booking, field, patch[field])
        if patch.get("status") is not None:
            booking.status = patch["status"]
        if patch.get("duration") is not None:
            booking.duration = patch["duration"]

        if patch.get("kart_selections") is not None:
            self._replace_selections(booking, patch["kart_selections"])
        if patch.get("kart_selections") is not None or patch.get("duration") is not None:
            booking.total_price = compute_total_price(booking.kart_selections)

        self.db.commit()
        logger.info("Booking %s updated: %s", booking.id, sorted(k for k, v in patch.items() if v is not None))

        if booking.status == "cancelled" and previous_status != "cancelled":
            logger.info("Booking %s cancelled", booking.id)
            self._send_cancellation(booking, settings_row)
        return booking

    def delete(self, booking_id: str) -> None:
        booking = self.get(booking_id)
        self.db.delete(booking)
        self.db.commit()
        logger.info("Booking %s deleted", booking_id)

    # Helpers

    def _replace_selections(self, booking: Booking, selections: list[dict]) -> None:
        snapshots = {(s.kart_id, s.timeslot): s.price_per_slot for s in booking.kart_selections}
        rows: list[BookingKartSelection] = []
        by_slot: dict[str, dict[str, int]] = {}

        for i, sel in enumerate(selections):
            kart_id = str(sel["kart_id"])
            kart = self.db.get(Kart, kart_id)
            if kart is None:
                raise KartNotFound(kart_id)

            quantity = int(sel["quantity"])
            if quantity < 1:
                raise BookingInputError(errors.INVALID_QUANTITY, f"Invalid quantity {quantity} for kart {kart_id}")
            if quantity > kart.quantity:
                raise BookingRejected(
                    errors.INSUFFICIENT_INVENTORY,
                    f"Only {kart.quantity} of '{kart.name}' exist, requested {quantity}",
                )

            timeslot = sel.get("timeslot")
            if timeslot:
                try:
                    timeslot = canonical_timeslot_key(timeslot)
                except InvalidTimeslotKey:
                    raise BookingInputError(errors.MALFORMED_TIMESLOT, f"Malformed timeslot: {timeslot!r}")
                slot_quantities = by_slot.setdefault(timeslot, {})
                slot_quantities[kart_id] = slot_quantities.get(kart_id, 0) + quantity
            else:
                timeslot = None

            price = sel.get("price_per_slot")
            if price is None:
                price = snapshots.get((kart_id, timeslot), kart.price_per_slot)

            rows.append(
                BookingKartSelection(
                    kart_id=kart_id,
                    quantity=quantity,
                    price_per_slot=Decimal(price),
                    timeslot=timeslot,
                    position=i,
                )
            )

        booking.kart_selections = rows
        booking.timeslot_kart_quantities = by_slot
        booking.timeslot_kart_selections = {slot: list(q.keys()) for slot, q in by_slot.items()}

    def _send_confirmation(self, booking: Booking, settings_row: AppSettings) -> None:
        if self.notifier is None:
            return
        try:
            sent = self.notifier.send_booking_confirmation(booking, settings_row)
        except Exception:
            logger.exception("Booking %s stored but confirmation email failed", booking.id)
            return
        if not sent:
            return

        # keep the returned booking loaded if the flag write rolls back
        self.db.expunge(booking)
        try:
            self.db.execute(update(Booking).where(Booking.id == booking.id).values(email_sent=True))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Booking %s confirmed by email but email_sent was not saved", booking.id)
            return
        booking.email_sent = True

    def _send_cancellation(self, booking: Booking, settings_row: AppSettings) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send_booking_cancellation(booking, settings_row)
        except Exception:
            logger.exception("Booking %s cancelled but cancellation email failed", booking.id)
