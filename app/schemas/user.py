from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)


class UserOut(BaseModel):
    id: str
    email: EmailStr
    name: str
    is_active: bool
    is_admin: bool
    last_login_at: datetime | None

    class Config:
        from_attributes = True
