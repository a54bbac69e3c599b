from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from app.services import errors
from app.services.business_calendar import is_open, timeslots_for_day
from app.services.errors import BookingInputError, BookingRejected
from app.services.inventory_ledger import compute_availability
from app.services.policy import BookingPolicy
from app.services.timeslot_key import InvalidTimeslotKey, TimeslotKey, format_time, parse_timeslot_key


@dataclass(frozen=True)
class Customer:
    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class KartRequest:
    kart_id: str
    quantity: int
    timeslot: str | None = None  # None: applies to every selected timeslot without its own selection


@dataclass(frozen=True)
class BookingRequest:
    customer: Customer
    date: date
    selected_timeslots: Sequence[str]
    kart_selections: Sequence[KartRequest]
    notes: str = ""


@dataclass(frozen=True)
class PricedSelection:
    kart_id: str
    quantity: int
    price_per_slot: Decimal
    timeslot: str | None

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.price_per_slot


@dataclass
class BookingDraft:
    customer: Customer
    date: date
    start_time: str
    end_time: str
    duration: int
    selected_timeslots: list[str]
    selections: list[PricedSelection]
    timeslot_kart_selections: dict[str, list[str]] = field(default_factory=dict)
    timeslot_kart_quantities: dict[str, dict[str, int]] = field(default_factory=dict)
    total_price: Decimal = Decimal("0")
    status: str = "confirmed"
    notes: str = ""


def compute_total_price(selections: Iterable) -> Decimal:
    total = Decimal("0")
    for sel in selections:
        total += sel.quantity * Decimal(sel.price_per_slot)
    return total


def _parse_selected(raw_keys: Sequence[str]) -> list[TimeslotKey]:
    if not raw_keys:
        raise BookingInputError(errors.NO_TIMESLOTS, "At least one timeslot must be selected")

    slots: list[TimeslotKey] = []
    for raw in raw_keys:
        try:
            key = parse_timeslot_key(raw)
        except InvalidTimeslotKey:
            raise BookingInputError(errors.MALFORMED_TIMESLOT, f"Malformed timeslot: {raw!r}")
        if key in slots:
            raise BookingInputError(errors.DUPLICATE_TIMESLOT, f"Timeslot selected twice: {key}")
        slots.append(key)
    return sorted(slots)


def resolve_kart_selections(slots: Sequence[TimeslotKey], requests: Sequence[KartRequest]) -> dict[TimeslotKey, Counter]:
    """Expand the customer's kart choices into a quantity per (timeslot, kart).

    Tagged choices apply to their timeslot. A selected timeslot without tagged
    choices takes the untagged choices, or failing those the first timeslot's
    choices.
    """
    tagged: dict[TimeslotKey, Counter] = {}
    untagged: Counter = Counter()

    for req in requests:
        if req.quantity < 0:
            raise BookingInputError(errors.INVALID_QUANTITY, f"Invalid quantity {req.quantity} for kart {req.kart_id}")
        if req.quantity == 0:
            continue
        if req.timeslot:
            try:
                key = parse_timeslot_key(req.timeslot)
            except InvalidTimeslotKey:
                raise BookingInputError(errors.MALFORMED_TIMESLOT, f"Malformed timeslot: {req.timeslot!r}")
            if key not in slots:
                raise BookingInputError(errors.MALFORMED_TIMESLOT, f"Kart selection refers to unselected timeslot {key}")
            tagged.setdefault(key, Counter())[req.kart_id] += req.quantity
        else:
            untagged[req.kart_id] += req.quantity

    resolved: dict[TimeslotKey, Counter] = {}
    for slot in slots:
        if slot in tagged:
            resolved[slot] = tagged[slot]
        elif untagged:
            resolved[slot] = Counter(untagged)
        elif slots[0] in tagged:
            resolved[slot] = Counter(tagged[slots[0]])
        else:
            raise BookingInputError(errors.NO_KARTS, f"No karts selected for timeslot {slot}")
    return resolved


def build_booking(
    request: BookingRequest,
    *,
    policy: BookingPolicy,
    karts: Sequence,
    bookings: Iterable,
    today: date,
    now: datetime,
) -> BookingDraft:
    """Validate a customer selection and price it.

    ``karts`` are the active karts and ``bookings`` the non-cancelled bookings
    for ``request.date``, both read as late as possible before the write.
    Raises :class:`BookingInputError` or :class:`BookingRejected`.
    """
    slots = _parse_selected(request.selected_timeslots)
    wanted = resolve_kart_selections(slots, request.kart_selections)

    karts_by_id = {str(k.id): k for k in karts}
    for per_slot in wanted.values():
        for kart_id in per_slot:
            if kart_id not in karts_by_id:
                raise BookingInputError(errors.UNKNOWN_KART, f"Unknown or inactive kart: {kart_id}")

    # 1. booking window
    if request.date < today:
        raise BookingRejected(errors.OUTSIDE_WINDOW, "Booking date is in the past")
    if request.date > today + timedelta(days=policy.max_advance_booking_days):
        raise BookingRejected(
            errors.OUTSIDE_WINDOW,
            f"Bookings can be made at most {policy.max_advance_booking_days} days in advance",
        )

    # 2. business calendar
    if not is_open(policy, request.date).open:
        raise BookingRejected(errors.CLOSED_DAY, "The track is closed on this date")

    # 3. only generated, not yet started timeslots
    offered = timeslots_for_day(policy, request.date)
    if request.date == today:
        current = format_time(now.hour * 60 + now.minute)
        offered = [s for s in offered if s.start_time >= current]
    offered_set = set(offered)
    for slot in slots:
        if slot not in offered_set:
            raise BookingRejected(errors.UNKNOWN_TIMESLOT, f"Timeslot {slot} is not available on {request.date.isoformat()}")

    # 4. session length
    duration = sum(s.duration for s in slots)
    if duration > policy.max_minutes_per_session:
        raise BookingRejected(
            errors.DURATION_EXCEEDED,
            f"Selected {duration} minutes, maximum per session is {policy.max_minutes_per_session}",
        )

    # 5. inventory against current bookings
    availability = {a.timeslot: a for a in compute_availability(slots, karts, bookings)}
    for slot in slots:
        for kart_id, qty in wanted[slot].items():
            row = availability[slot].for_kart(kart_id)
            if qty > row.available:
                raise BookingRejected(
                    errors.INSUFFICIENT_INVENTORY,
                    f"Only {row.available} of '{row.name}' left for {slot}, requested {qty}",
                )

    # 6. karts per timeslot
    for slot in slots:
        count = sum(wanted[slot].values())
        if count > policy.max_karts_per_timeslot:
            raise BookingRejected(
                errors.KART_LIMIT_EXCEEDED,
                f"{count} karts requested for {slot}, maximum is {policy.max_karts_per_timeslot}",
            )

    selections: list[PricedSelection] = []
    kart_ids_by_slot: dict[str, list[str]] = {}
    quantities_by_slot: dict[str, dict[str, int]] = {}
    for slot in slots:
        key = str(slot)
        for kart_id, qty in wanted[slot].items():
            price = Decimal(karts_by_id[kart_id].price_per_slot)
            selections.append(PricedSelection(kart_id=kart_id, quantity=qty, price_per_slot=price, timeslot=key))
        kart_ids_by_slot[key] = list(wanted[slot].keys())
        quantities_by_slot[key] = dict(wanted[slot])

    return BookingDraft(
        customer=request.customer,
        date=request.date,
        start_time=slots[0].start_time,
        end_time=slots[-1].end_time,
        duration=duration,
        selected_timeslots=[str(s) for s in slots],
        selections=selections,
        timeslot_kart_selections=kart_ids_by_slot,
        timeslot_kart_quantities=quantities_by_slot,
        total_price=compute_total_price(selections),
        status="confirmed",
        notes=request.notes or "",
    )
