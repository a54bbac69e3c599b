"""Per-timeslot kart inventory.

A booking occupies exactly the timeslots listed in its ``selected_timeslots``;
neighbouring or overlapping-in-time slots are not affected. Within an occupied
slot it uses the quantities of the selections tagged with that slot (plus
untagged legacy selections, see :mod:`app.services.legacy_bookings`).
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from app.services.legacy_bookings import legacy_occupies, untagged_usage
from app.services.timeslot_key import InvalidTimeslotKey, TimeslotKey, format_time, parse_timeslot_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KartAvailability:
    kart_id: str
    name: str
    type: str
    price_per_slot: Decimal
    available: int
    total: int
    booked: int


@dataclass(frozen=True)
class TimeslotAvailability:
    timeslot: TimeslotKey
    kart_availability: tuple[KartAvailability, ...]

    @property
    def start_time(self) -> str:
        return self.timeslot.start_time

    @property
    def end_time(self) -> str:
        return self.timeslot.end_time

    @property
    def key(self) -> str:
        return str(self.timeslot)

    @property
    def total_availability(self) -> int:
        return sum(k.available for k in self.kart_availability)

    @property
    def total_booked(self) -> int:
        return sum(k.booked for k in self.kart_availability)

    @property
    def total_karts(self) -> int:
        return sum(k.total for k in self.kart_availability)

    def for_kart(self, kart_id: str) -> KartAvailability | None:
        return next((k for k in self.kart_availability if k.kart_id == kart_id), None)


def _selected_keys(booking) -> set[TimeslotKey]:
    keys = set()
    for raw in booking.selected_timeslots or []:
        try:
            keys.add(parse_timeslot_key(raw))
        except InvalidTimeslotKey:
            logger.warning("Booking %s has malformed timeslot %r", getattr(booking, "id", "?"), raw)
    return keys


def occupied_quantities(booking, slot: TimeslotKey) -> Counter:
    """Kart quantities (by kart id) that ``booking`` takes out of ``slot``."""
    if getattr(booking, "status", None) == "cancelled":
        return Counter()

    if booking.selected_timeslots:
        if slot not in _selected_keys(booking):
            return Counter()
    elif not legacy_occupies(booking, slot):
        return Counter()

    usage: Counter = Counter()
    for sel in booking.kart_selections:
        if not sel.timeslot:
            continue
        try:
            tagged = parse_timeslot_key(sel.timeslot)
        except InvalidTimeslotKey:
            continue
        if tagged == slot:
            usage[str(sel.kart_id)] += sel.quantity

    usage.update(untagged_usage(booking))
    return usage


def compute_availability(
    timeslots: Sequence[TimeslotKey],
    karts: Sequence,
    bookings: Iterable,
) -> list[TimeslotAvailability]:
    bookings = list(bookings)
    result: list[TimeslotAvailability] = []

    for slot in timeslots:
        booked: Counter = Counter()
        for b in bookings:
            booked.update(occupied_quantities(b, slot))

        rows = []
        for kart in karts:
            kart_booked = booked.get(str(kart.id), 0)
            rows.append(
                KartAvailability(
                    kart_id=str(kart.id),
                    name=kart.name,
                    type=kart.type,
                    price_per_slot=kart.price_per_slot,
                    available=max(0, kart.quantity - kart_booked),
                    total=kart.quantity,
                    booked=kart_booked,
                )
            )
        result.append(TimeslotAvailability(timeslot=slot, kart_availability=tuple(rows)))

    return result


def filter_past_timeslots(slots: Sequence[TimeslotAvailability], now: datetime) -> list[TimeslotAvailability]:
    """Keep slots starting at or after the current minute.

    Compares wall-clock ``HH:MM`` only, so a slot stays bookable until its
    start minute has passed.
    """
    current = format_time(now.hour * 60 + now.minute)
    return [s for s in slots if s.start_time >= current]
