from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.models.kart import Kart
from app.schemas.kart import KartCreate, KartOut, KartUpdate

router = APIRouter()


@router.get("", response_model=list[KartOut])
def list_karts(db: Session = Depends(get_db)):
    return db.execute(select(Kart).where(Kart.is_active == True).order_by(Kart.name)).scalars().all()


@router.get("/admin/all", response_model=list[KartOut])
def list_karts_admin(db: Session = Depends(get_db), user=Depends(require_admin)):
    return db.execute(select(Kart).order_by(Kart.name)).scalars().all()


@router.get("/{kart_id}", response_model=KartOut)
def get_kart(kart_id: str, db: Session = Depends(get_db)):
    k = db.get(Kart, kart_id)
    if not k:
        raise HTTPException(status_code=404, detail="Kart not found")
    return k


@router.post("", response_model=KartOut, status_code=status.HTTP_201_CREATED)
def create_kart(payload: KartCreate, db: Session = Depends(get_db), user=Depends(require_admin)):
    data = payload.dict()
    if not data.get("image"):
        data.pop("image")
    k = Kart(**data, is_active=True)
    db.add(k)
    db.commit()
    db.refresh(k)
    return k


@router.put("/{kart_id}", response_model=KartOut)
def update_kart(kart_id: str, payload: KartUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    k = db.get(Kart, kart_id)
    if not k:
        raise HTTPException(status_code=404, detail="Kart not found")
    # Bookings keep their price snapshots; only future bookings see the new price
    data = payload.dict(exclude_unset=True)
    for key, val in data.items():
        if val is not None:
            setattr(k, key, val)
    db.commit()
    db.refresh(k)
    return k


@router.delete("/{kart_id}")
def delete_kart(kart_id: str, db: Session = Depends(get_db), user=Depends(require_admin)):
    k = db.get(Kart, kart_id)
    if not k:
        raise HTTPException(status_code=404, detail="Kart not found")
    db.delete(k)
    db.commit()
    return {"message": "Kart removed"}
