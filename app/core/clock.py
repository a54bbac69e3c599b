from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import get_settings


class Clock:
    """Current wall-clock time in the track's timezone."""

    def __init__(self, timezone: str | None = None):
        self.tz = ZoneInfo(timezone or get_settings().timezone)

    def now(self) -> datetime:
        return datetime.now(tz=self.tz)

    def today(self) -> date:
        return self.now().date()


def get_clock() -> Clock:
    return Clock()
