from __future__ import annotations

from app.services.timeslot_key import TimeslotKey, parse_time


def generate_timeslots(open_time: str, close_time: str, duration_minutes: int) -> list[TimeslotKey]:
    """Split an open/close window into contiguous fixed-length timeslots.

    A trailing interval shorter than ``duration_minutes`` is dropped. Windows
    that close at or before they open produce no slots; nothing wraps past
    midnight.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    start = parse_time(open_time)
    close = parse_time(close_time)

    slots: list[TimeslotKey] = []
    while start + duration_minutes <= close:
        slots.append(TimeslotKey(start, start + duration_minutes))
        start += duration_minutes
    return slots
