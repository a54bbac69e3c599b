from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.models.settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingDay:
    day: str  # monday..sunday
    is_open: bool
    open_time: str
    close_time: str


@dataclass(frozen=True)
class BookingPolicy:
    """Business rules snapshot, loaded once per request from the settings row."""

    timeslot_duration: int = 30
    max_advance_booking_days: int = 30
    max_karts_per_timeslot: int = 5
    max_minutes_per_session: int = 60
    working_hours: tuple[WorkingDay, ...] = ()
    holidays: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def from_settings(cls, row: AppSettings, timezone: str) -> "BookingPolicy":
        tz = ZoneInfo(timezone)
        days = []
        for entry in row.working_hours or []:
            if not isinstance(entry, dict) or not entry.get("day"):
                continue
            days.append(
                WorkingDay(
                    day=str(entry["day"]).lower(),
                    is_open=bool(entry.get("is_open", False)),
                    open_time=str(entry.get("open_time") or "00:00"),
                    close_time=str(entry.get("close_time") or "00:00"),
                )
            )

        holidays = set()
        for entry in row.holidays or []:
            value = entry.get("date") if isinstance(entry, dict) else None
            d = parse_holiday_date(value, tz)
            if d is None:
                logger.warning("Ignoring holiday with unreadable date: %r", value)
                continue
            holidays.add(d)

        return cls(
            timeslot_duration=row.timeslot_duration,
            max_advance_booking_days=row.max_advance_booking_days,
            max_karts_per_timeslot=row.max_karts_per_timeslot,
            max_minutes_per_session=row.max_minutes_per_session,
            working_hours=tuple(days),
            holidays=frozenset(holidays),
        )


def parse_holiday_date(value, tz: ZoneInfo) -> date | None:
    """Reduce a stored holiday to a calendar date in the track's timezone.

    Plain ``YYYY-MM-DD`` strings are taken as-is. Instants with an offset
    (``2026-12-23T22:00:00Z``) are converted to local time first, otherwise a
    UTC-midnight holiday would land on the wrong day.
    """
    if isinstance(value, datetime):
        dt_value = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if len(text) == 10:
            try:
                return date.fromisoformat(text)
            except ValueError:
                return None
        try:
            dt_value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt_value.tzinfo is not None:
        dt_value = dt_value.astimezone(tz)
    return dt_value.date()
