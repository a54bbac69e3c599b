from __future__ import annotations

from sqlalchemy import select

from app.db.base import Base
from app.db.session import engine, SessionLocal

# Import models to register with SQLAlchemy
import app.models  # noqa: F401


DEFAULT_KART_TYPES = [
    {"name": "Adult", "description": "Standard kart for adults, suitable for individuals over 16 years of age."},
    {"name": "Child", "description": "Smaller kart designed for children between 8-15 years of age."},
    {"name": "Duo", "description": "Two-seater kart for an adult and a child, or for two smaller adults."},
    {"name": "Racing", "description": "High-performance kart for experienced drivers."},
    {"name": "Beginner", "description": "Slower kart with enhanced safety features for first-time drivers."},
]


def main() -> int:
    Base.metadata.create_all(bind=engine)

    # Seed kart types and default settings row
    from app.models.kart_type import KartType
    from app.models.settings import AppSettings

    db = SessionLocal()
    try:
        existing = set(db.execute(select(KartType.name)).scalars().all())
        for t in DEFAULT_KART_TYPES:
            if t["name"] not in existing:
                db.add(KartType(name=t["name"], description=t["description"], is_active=True))

        if db.get(AppSettings, 1) is None:
            db.add(AppSettings(id=1))

        db.commit()
    finally:
        db.close()

    print("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
