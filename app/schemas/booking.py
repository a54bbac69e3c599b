from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

BookingStatus = Literal["pending", "confirmed", "cancelled"]


class KartSelectionIn(BaseModel):
    kart_id: str
    quantity: int = Field(ge=0, le=999)
    # "HH:MM-HH:MM"; omitted means every selected timeslot without its own selection
    timeslot: str | None = None


class BookingCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=3, max_length=32)

    date: dt.date
    selected_timeslots: list[str] = Field(default_factory=list)
    kart_selections: list[KartSelectionIn] = Field(default_factory=list)

    notes: str = Field(default="", max_length=2000)


class KartSelectionPatch(BaseModel):
    kart_id: str
    quantity: int = Field(ge=1, le=999)
    price_per_slot: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    timeslot: str | None = None


class BookingUpdate(BaseModel):
    customer_name: str | None = Field(default=None, min_length=1, max_length=255)
    customer_email: EmailStr | None = None
    customer_phone: str | None = Field(default=None, min_length=3, max_length=32)
    duration: int | None = Field(default=None, ge=1, le=1440)
    kart_selections: list[KartSelectionPatch] | None = None
    status: BookingStatus | None = None
    notes: str | None = Field(default=None, max_length=2000)


class KartSelectionOut(BaseModel):
    kart_id: str
    quantity: int
    price_per_slot: Decimal
    timeslot: str | None

    class Config:
        from_attributes = True


class BookingOut(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    date: dt.date
    start_time: str
    end_time: str
    duration: int
    selected_timeslots: list[str]
    kart_selections: list[KartSelectionOut]
    timeslot_kart_selections: dict[str, list[str]]
    timeslot_kart_quantities: dict[str, dict[str, int]]
    total_price: Decimal
    status: BookingStatus
    notes: str
    email_sent: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class KartAvailabilityOut(BaseModel):
    kart_id: str
    name: str
    type: str
    price_per_slot: Decimal
    available: int
    total: int
    booked: int


class TimeslotOut(BaseModel):
    key: str  # "HH:MM-HH:MM"
    start_time: str
    end_time: str
    kart_availability: list[KartAvailabilityOut]
    total_availability: int
    total_booked: int
    total_karts: int
