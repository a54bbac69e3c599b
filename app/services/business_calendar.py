from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from app.models.settings import WEEKDAYS
from app.services.policy import BookingPolicy
from app.services.timeslot_generator import generate_timeslots
from app.services.timeslot_key import InvalidTimeslotKey, TimeslotKey, parse_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DaySchedule:
    open: bool
    open_time: str | None = None
    close_time: str | None = None


CLOSED = DaySchedule(open=False)


def is_open(policy: BookingPolicy, target_date: date) -> DaySchedule:
    if target_date in policy.holidays:
        return CLOSED

    day_name = WEEKDAYS[target_date.weekday()]
    entry = next((wd for wd in policy.working_hours if wd.day == day_name), None)
    if entry is None or not entry.is_open:
        return CLOSED

    try:
        parse_time(entry.open_time)
        parse_time(entry.close_time)
    except InvalidTimeslotKey:
        logger.warning("Working hours for %s are malformed: %s-%s", day_name, entry.open_time, entry.close_time)
        return CLOSED

    return DaySchedule(open=True, open_time=entry.open_time, close_time=entry.close_time)


def timeslots_for_day(policy: BookingPolicy, target_date: date) -> list[TimeslotKey]:
    schedule = is_open(policy, target_date)
    if not schedule.open:
        return []
    return generate_timeslots(schedule.open_time, schedule.close_time, policy.timeslot_duration)
