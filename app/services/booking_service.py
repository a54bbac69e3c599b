from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.config import get_settings
from app.models.booking import Booking
from app.services.booking_builder import BookingRequest, build_booking
from app.services.booking_gateway import BookingGateway
from app.services.business_calendar import timeslots_for_day
from app.services.errors import BookingError
from app.services.inventory_ledger import TimeslotAvailability, compute_availability, filter_past_timeslots
from app.services.settings_service import load_policy

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, db: Session, *, clock: Clock, notifier=None, serialize_writes: bool | None = None):
        self.db = db
        self.clock = clock
        self.gateway = BookingGateway(db, notifier)
        if serialize_writes is None:
            serialize_writes = get_settings().booking_serialize_writes
        self.serialize_writes = serialize_writes

    def timeslots(self, target_date: date) -> list[TimeslotAvailability]:
        """Bookable timeslots for a date with remaining kart quantities.

        Past dates, closed days and holidays give an empty list. For today,
        slots that have already started are left out.
        """
        today = self.clock.today()
        if target_date < today:
            return []

        policy = load_policy(self.db)
        slots = timeslots_for_day(policy, target_date)
        if not slots:
            return []

        availability = compute_availability(slots, self.gateway.active_karts(), self.gateway.day_bookings(target_date))
        if target_date == today:
            availability = filter_past_timeslots(availability, self.clock.now())
        return availability

    def create_booking(self, request: BookingRequest) -> Booking:
        """Validate against the latest bookings and store.

        With ``serialize_writes`` the read of existing bookings and the insert
        happen while holding the date's lock row, so two requests for the last
        kart cannot both succeed.
        """
        policy = load_policy(self.db)

        if self.serialize_writes:
            self.gateway.lock_day(request.date)

        try:
            draft = build_booking(
                request,
                policy=policy,
                karts=self.gateway.active_karts(),
                bookings=self.gateway.day_bookings(request.date),
                today=self.clock.today(),
                now=self.clock.now(),
            )
        except BookingError as e:
            self.db.rollback()
            logger.info("Booking for %s rejected: %s (%s)", request.date.isoformat(), e.code, e.message)
            raise

        return self.gateway.create(draft)
