from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.user import User
from app.services.booking_service import BookingService
from app.services.notifier import get_notifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/token")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    try:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")

    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive or missing user")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized as an admin")
    return user


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier=Depends(get_notifier),
) -> BookingService:
    return BookingService(db, clock=clock, notifier=notifier)
