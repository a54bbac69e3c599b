from __future__ import annotations

from sqlalchemy import Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models._mixins import TimestampMixin

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def default_working_hours() -> list[dict]:
    hours = [{"day": d, "is_open": True, "open_time": "09:00", "close_time": "18:00"} for d in WEEKDAYS[:5]]
    hours.append({"day": "saturday", "is_open": True, "open_time": "10:00", "close_time": "16:00"})
    hours.append({"day": "sunday", "is_open": False, "open_time": "00:00", "close_time": "00:00"})
    return hours


def default_email_templates() -> list[dict]:
    return [
        {
            "type": "booking_confirmation",
            "subject": "Booking Confirmation",
            "body": (
                "<p>Dear {{customerName}},</p><p>Your booking has been confirmed for {{date}} "
                "from {{startTime}} to {{endTime}}.</p><p>Thank you for choosing our service!</p>"
            ),
        },
        {
            "type": "booking_cancellation",
            "subject": "Booking Cancellation",
            "body": (
                "<p>Dear {{customerName}},</p><p>Your booking for {{date}} from {{startTime}} "
                "to {{endTime}} has been cancelled.</p>"
            ),
        },
        {
            "type": "admin_notification",
            "subject": "New Booking Notification",
            "body": (
                "<p>A new booking has been made:</p><p>Customer: {{customerName}}<br>"
                "Date: {{date}}<br>Time: {{startTime}} - {{endTime}}</p>"
            ),
        },
    ]


def default_email_settings() -> dict:
    return {"provider": "smtp", "host": "", "port": 587, "username": "", "password": "", "api_key": ""}


class AppSettings(Base, TimestampMixin):
    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)

    # Business identity
    business_name: Mapped[str] = mapped_column(String(255), nullable=False, default="Kart Booking System")
    business_email: Mapped[str] = mapped_column(String(255), nullable=False, default="info@kartbooking.com")
    admin_notification_emails: Mapped[list] = mapped_column(JSON, nullable=False, default=lambda: ["admin@kartbooking.com"])

    # Timeslots and booking limits
    timeslot_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=30)  # minutes
    max_consecutive_slots: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    min_advance_booking_time: Mapped[int] = mapped_column(Integer, nullable=False, default=2)  # hours
    max_advance_booking_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    max_karts_per_timeslot: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    max_minutes_per_session: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    # [{"day": "monday", "is_open": true, "open_time": "09:00", "close_time": "18:00"}, ...]
    working_hours: Mapped[list] = mapped_column(JSON, nullable=False, default=default_working_hours)
    # [{"date": "2026-12-24", "description": "..."}]
    holidays: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    email_templates: Mapped[list] = mapped_column(JSON, nullable=False, default=default_email_templates)
    email_settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=default_email_settings)
