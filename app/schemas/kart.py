from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class KartCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    type: str = Field(min_length=1, max_length=64)
    image: str | None = Field(default=None, max_length=2000)
    price_per_slot: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(default=1, ge=0, le=1000)


class KartUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    type: str | None = Field(default=None, min_length=1, max_length=64)
    image: str | None = Field(default=None, max_length=2000)
    price_per_slot: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(default=None, ge=0, le=1000)
    is_active: bool | None = None


class KartOut(BaseModel):
    id: str
    name: str
    description: str
    type: str
    image: str
    price_per_slot: Decimal
    quantity: int
    is_active: bool

    class Config:
        from_attributes = True
