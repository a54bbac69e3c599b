from __future__ import annotations

import argparse
from decimal import Decimal

from sqlalchemy import delete

from app.db.session import SessionLocal
from app.models.booking import Booking
from app.models.kart import Kart

SAMPLE_KARTS = [
    {"name": "Adult Kart 1", "description": "Standard adult kart with 200cc engine", "type": "Adult", "price_per_slot": Decimal("25"), "quantity": 2},
    {"name": "Adult Kart 2", "description": "Premium adult kart with 250cc engine", "type": "Adult", "price_per_slot": Decimal("30"), "quantity": 1},
    {"name": "Child Kart 1", "description": "Safe and fun kart for children", "type": "Child", "price_per_slot": Decimal("20"), "quantity": 3},
]


def main() -> int:
    parser = argparse.ArgumentParser(description="Load sample karts (run init_db first)")
    parser.add_argument("--destroy", action="store_true", help="remove all karts and bookings instead")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.destroy:
            db.execute(delete(Booking))
            db.execute(delete(Kart))
            db.commit()
            print("Data destroyed")
            return 0

        for k in SAMPLE_KARTS:
            db.add(Kart(**k, is_active=True))
        db.commit()
        print(f"Imported {len(SAMPLE_KARTS)} karts")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
