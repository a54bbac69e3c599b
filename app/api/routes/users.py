from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_current_user, get_db
from app.core.security import create_access_token, hash_password
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.user import ProfileUpdate, UserOut
from app.services.auth_service import authenticate, normalize_email

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, email=str(payload.email), password=payload.password)
    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/token", response_model=TokenResponse)
def login_form(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 password flow for the interactive docs
    user = authenticate(db, email=form.username, password=form.password)
    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=UserOut)
def update_profile(payload: ProfileUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    if payload.email is not None:
        email = normalize_email(str(payload.email))
        dup = db.execute(select(User).where(User.email == email, User.id != user.id)).scalar_one_or_none()
        if dup:
            raise HTTPException(status_code=409, detail="Email already exists")
        user.email = email
    if payload.name is not None:
        user.name = payload.name
    if payload.password:
        user.hashed_password = hash_password(payload.password)

    db.commit()
    return user
