from __future__ import annotations

from pydantic import BaseModel, Field


class KartTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    description: str = Field(min_length=1, max_length=2000)
    is_active: bool = True


class KartTypeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    is_active: bool | None = None


class KartTypeOut(BaseModel):
    id: str
    name: str
    description: str
    is_active: bool

    class Config:
        from_attributes = True
