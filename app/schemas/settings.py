from __future__ import annotations

import datetime as dt
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.config import get_settings
from app.services.policy import parse_holiday_date

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
TemplateType = Literal["booking_confirmation", "booking_cancellation", "admin_notification"]

HHMM = r"^([01][0-9]|2[0-3]):[0-5][0-9]$|^24:00$"


class WorkingHoursEntry(BaseModel):
    day: Weekday
    is_open: bool = True
    open_time: str = Field(default="09:00", pattern=HHMM)
    close_time: str = Field(default="18:00", pattern=HHMM)


class HolidayEntry(BaseModel):
    date: str  # YYYY-MM-DD
    description: str

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        if parse_holiday_date(v, ZoneInfo(get_settings().timezone)) is None:
            raise ValueError("Holiday date must be YYYY-MM-DD")
        return v


class EmailTemplate(BaseModel):
    type: TemplateType
    subject: str
    body: str


class EmailSettings(BaseModel):
    provider: Literal["smtp", "sendgrid", "mailgun"] = "smtp"
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    api_key: str = ""


class EmailSettingsUpdate(BaseModel):
    provider: Literal["smtp", "sendgrid", "mailgun"] | None = None
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    api_key: str | None = None


class PublicSettingsOut(BaseModel):
    business_name: str
    business_email: str
    timeslot_duration: int
    max_consecutive_slots: int
    min_advance_booking_time: int
    max_advance_booking_days: int
    max_karts_per_timeslot: int
    max_minutes_per_session: int
    working_hours: list[WorkingHoursEntry]
    holidays: list[HolidayEntry]

    class Config:
        from_attributes = True


class SettingsOut(PublicSettingsOut):
    admin_notification_emails: list[str]
    email_templates: list[EmailTemplate]
    email_settings: EmailSettings


class SettingsUpdate(BaseModel):
    business_name: str | None = Field(default=None, min_length=1, max_length=255)
    business_email: EmailStr | None = None
    admin_notification_emails: list[EmailStr] | None = None

    timeslot_duration: int | None = Field(default=None, ge=5, le=720)
    max_consecutive_slots: int | None = Field(default=None, ge=1, le=96)
    min_advance_booking_time: int | None = Field(default=None, ge=0, le=720)
    max_advance_booking_days: int | None = Field(default=None, ge=0, le=730)
    max_karts_per_timeslot: int | None = Field(default=None, ge=1, le=1000)
    max_minutes_per_session: int | None = Field(default=None, ge=1, le=1440)

    working_hours: list[WorkingHoursEntry] | None = None
    holidays: list[HolidayEntry] | None = None
    email_templates: list[EmailTemplate] | None = None
    email_settings: EmailSettingsUpdate | None = None


class HolidayCreate(BaseModel):
    date: dt.date
    description: str = Field(min_length=1, max_length=255)


class HolidayDelete(BaseModel):
    date: dt.date


class EmailTemplateUpdate(BaseModel):
    subject: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)


class TestEmailRequest(BaseModel):
    email: EmailStr
