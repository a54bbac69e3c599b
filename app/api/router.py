from __future__ import annotations

from fastapi import APIRouter

from app.api.routes import bookings, kart_types, karts, settings, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(karts.router, prefix="/karts", tags=["karts"])
api_router.include_router(kart_types.router, prefix="/kart-types", tags=["kart-types"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
