"""Compatibility rules for bookings stored before per-timeslot selections existed.

Older records carry only ``start_time`` (no ``selected_timeslots``) and kart
selections without a ``timeslot`` tag. The inventory ledger consults these
two functions and nothing else for such data; once no legacy bookings remain
this module can go.
"""

from __future__ import annotations

from collections import Counter

from app.services.timeslot_key import InvalidTimeslotKey, TimeslotKey, parse_time


def legacy_occupies(booking, slot: TimeslotKey) -> bool:
    """A booking without selected timeslots occupies only the slot it starts in."""
    if booking.selected_timeslots:
        return False
    try:
        return parse_time(booking.start_time) == slot.start
    except InvalidTimeslotKey:
        return False


def untagged_usage(booking) -> Counter:
    """Quantities of untagged selections; they count against every occupied slot."""
    usage: Counter = Counter()
    for sel in booking.kart_selections:
        if not sel.timeslot:
            usage[str(sel.kart_id)] += sel.quantity
    return usage
