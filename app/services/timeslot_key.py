"""Canonical timeslot keys.

A timeslot is a half-open wall-clock interval inside a single day, written on
the wire and in storage as ``"HH:MM-HH:MM"``. Every boundary parses through
:func:`parse_timeslot_key` and renders through :func:`format_timeslot_key`, so
comparisons are structural (``TimeslotKey == TimeslotKey``) rather than string
munging.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")
_WHITESPACE_RE = re.compile(r"\s+")


class InvalidTimeslotKey(ValueError):
    pass


def parse_time(value: str) -> int:
    """Parse ``"HH:MM"`` into minutes since midnight. ``"24:00"`` is the end of the day."""
    m = _TIME_RE.match(_WHITESPACE_RE.sub("", value or ""))
    if not m:
        raise InvalidTimeslotKey(f"Invalid time: {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise InvalidTimeslotKey(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise InvalidTimeslotKey(f"Minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True, order=True)
class TimeslotKey:
    start: int  # minutes since midnight
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise InvalidTimeslotKey(f"Invalid timeslot bounds: {self.start}-{self.end}")

    @property
    def start_time(self) -> str:
        return format_time(self.start)

    @property
    def end_time(self) -> str:
        return format_time(self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return format_timeslot_key(self)


def parse_timeslot_key(value: str) -> TimeslotKey:
    if not isinstance(value, str):
        raise InvalidTimeslotKey(f"Invalid timeslot: {value!r}")
    compact = _WHITESPACE_RE.sub("", value)
    parts = compact.split("-")
    if len(parts) != 2:
        raise InvalidTimeslotKey(f"Invalid timeslot: {value!r}")
    return TimeslotKey(parse_time(parts[0]), parse_time(parts[1]))


def format_timeslot_key(key: TimeslotKey) -> str:
    return f"{key.start_time}-{key.end_time}"


def canonical_timeslot_key(value: str) -> str:
    return format_timeslot_key(parse_timeslot_key(value))
