from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.models.kart_type import KartType
from app.schemas.kart_type import KartTypeCreate, KartTypeOut, KartTypeUpdate

router = APIRouter()


def _name_taken(db: Session, name: str, exclude_id: str | None = None) -> bool:
    q = select(KartType.id).where(KartType.name == name)
    if exclude_id:
        q = q.where(KartType.id != exclude_id)
    return db.execute(q.limit(1)).first() is not None


@router.get("", response_model=list[KartTypeOut])
def list_kart_types(db: Session = Depends(get_db)):
    return db.execute(select(KartType).where(KartType.is_active == True).order_by(KartType.name)).scalars().all()


@router.get("/admin/all", response_model=list[KartTypeOut])
def list_kart_types_admin(db: Session = Depends(get_db), user=Depends(require_admin)):
    return db.execute(select(KartType).order_by(KartType.name)).scalars().all()


@router.get("/{kart_type_id}", response_model=KartTypeOut)
def get_kart_type(kart_type_id: str, db: Session = Depends(get_db)):
    t = db.get(KartType, kart_type_id)
    if not t:
        raise HTTPException(status_code=404, detail="Kart type not found")
    return t


@router.post("", response_model=KartTypeOut, status_code=status.HTTP_201_CREATED)
def create_kart_type(payload: KartTypeCreate, db: Session = Depends(get_db), user=Depends(require_admin)):
    if _name_taken(db, payload.name):
        raise HTTPException(status_code=400, detail="Kart type already exists")
    t = KartType(name=payload.name, description=payload.description, is_active=payload.is_active)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@router.put("/{kart_type_id}", response_model=KartTypeOut)
def update_kart_type(kart_type_id: str, payload: KartTypeUpdate, db: Session = Depends(get_db), user=Depends(require_admin)):
    t = db.get(KartType, kart_type_id)
    if not t:
        raise HTTPException(status_code=404, detail="Kart type not found")
    data = payload.dict(exclude_unset=True)
    if data.get("name") and _name_taken(db, data["name"], exclude_id=t.id):
        raise HTTPException(status_code=400, detail="Kart type already exists")
    for key, val in data.items():
        if val is not None:
            setattr(t, key, val)
    db.commit()
    db.refresh(t)
    return t


@router.delete("/{kart_type_id}")
def delete_kart_type(kart_type_id: str, db: Session = Depends(get_db), user=Depends(require_admin)):
    t = db.get(KartType, kart_type_id)
    if not t:
        raise HTTPException(status_code=404, detail="Kart type not found")
    db.delete(t)
    db.commit()
    return {"message": "Kart type removed"}
