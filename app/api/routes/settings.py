from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.settings import (
    EmailTemplate,
    EmailTemplateUpdate,
    HolidayCreate,
    HolidayDelete,
    HolidayEntry,
    PublicSettingsOut,
    SettingsOut,
    SettingsUpdate,
    TestEmailRequest,
)
from app.services.notifier import get_notifier
from app.services.settings_service import add_holiday, get_or_create_settings, remove_holiday, update_email_template

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/public", response_model=PublicSettingsOut)
def get_public_settings(db: Session = Depends(get_db)):
    return get_or_create_settings(db)


@router.get("", response_model=SettingsOut)
def get_settings(db: Session = Depends(get_db), user=Depends(require_admin)):
    return get_or_create_settings(db)


@router.put("", response_model=SettingsOut)
def update_settings(payload: SettingsUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    s = get_or_create_settings(db)
    data = payload.dict(exclude_unset=True)

    email_settings = data.pop("email_settings", None)
    if email_settings:
        merged = dict(s.email_settings or {})
        merged.update({k: v for k, v in email_settings.items() if v is not None})
        s.email_settings = merged

    for k, v in data.items():
        if v is not None:
            setattr(s, k, v)
    db.commit()
    db.refresh(s)
    logger.info("Settings updated by %s: %s", user.email, sorted(data.keys()))
    return s


@router.post("/holidays", response_model=list[HolidayEntry], status_code=status.HTTP_201_CREATED)
def create_holiday(payload: HolidayCreate, db: Session = Depends(get_db), user=Depends(require_admin)):
    try:
        return add_holiday(db, holiday_date=payload.date, description=payload.description)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/holidays", response_model=list[HolidayEntry])
def delete_holiday(payload: HolidayDelete, db: Session = Depends(get_db), user=Depends(require_admin)):
    return remove_holiday(db, holiday_date=payload.date)


@router.put("/email-templates/{template_type}", response_model=EmailTemplate)
def put_email_template(template_type: str, payload: EmailTemplateUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    t = update_email_template(db, template_type=template_type, subject=payload.subject, body=payload.body)
    if t is None:
        raise HTTPException(status_code=404, detail="Email template not found")
    return t


@router.post("/test-email")
def send_test_email(
    payload: TestEmailRequest,
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
    user=Depends(require_admin),
):
    s = get_or_create_settings(db)
    try:
        notifier.send_test_email(str(payload.email), s)
    except Exception as e:
        logger.exception("Test email to %s failed", payload.email)
        raise HTTPException(status_code=500, detail=f"Failed to send test email: {e}") from e
    return {"message": "Test email sent successfully"}
