# Import all models so that SQLAlchemy registers them for metadata.create_all
from app.models.user import User
from app.models.kart import Kart
from app.models.kart_type import KartType
from app.models.booking import Booking, BookingKartSelection, BookingDayLock
from app.models.settings import AppSettings

__all__ = [
    "User",
    "Kart",
    "KartType",
    "Booking",
    "BookingKartSelection",
    "BookingDayLock",
    "AppSettings",
]
