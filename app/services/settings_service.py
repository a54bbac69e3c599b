from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.settings import AppSettings
from app.services.policy import BookingPolicy, parse_holiday_date


def get_or_create_settings(db: Session) -> AppSettings:
    s = db.get(AppSettings, 1)
    if s is None:
        s = AppSettings(id=1)
        db.add(s)
        db.commit()
        db.refresh(s)
    return s


def load_policy(db: Session) -> BookingPolicy:
    return BookingPolicy.from_settings(get_or_create_settings(db), get_settings().timezone)


def _holiday_date(entry: dict) -> date | None:
    return parse_holiday_date(entry.get("date"), ZoneInfo(get_settings().timezone))


def add_holiday(db: Session, *, holiday_date: date, description: str) -> list[dict]:
    """Append a holiday; returns the updated list or raises ValueError on a duplicate date."""
    s = get_or_create_settings(db)
    holidays = list(s.holidays or [])
    if any(_holiday_date(h) == holiday_date for h in holidays):
        raise ValueError("Holiday already exists for this date")
    holidays.append({"date": holiday_date.isoformat(), "description": description})
    holidays.sort(key=lambda h: str(h.get("date")))
    s.holidays = holidays
    db.commit()
    return s.holidays


def remove_holiday(db: Session, *, holiday_date: date) -> list[dict]:
    s = get_or_create_settings(db)
    s.holidays = [h for h in s.holidays or [] if _holiday_date(h) != holiday_date]
    db.commit()
    return s.holidays


def update_email_template(db: Session, *, template_type: str, subject: str, body: str) -> dict | None:
    s = get_or_create_settings(db)
    templates = [dict(t) for t in s.email_templates or []]
    for t in templates:
        if t.get("type") == template_type:
            t["subject"] = subject
            t["body"] = body
            s.email_templates = templates
            db.commit()
            return t
    return None
