from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from app.core.deps import get_booking_service, require_admin
from app.schemas.booking import BookingCreate, BookingOut, BookingStatus, BookingUpdate, KartAvailabilityOut, TimeslotOut
from app.services.booking_builder import BookingRequest, Customer, KartRequest
from app.services.booking_service import BookingService
from app.services.inventory_ledger import TimeslotAvailability

router = APIRouter()


def _timeslot_out(a: TimeslotAvailability) -> TimeslotOut:
    return TimeslotOut(
        key=a.key,
        start_time=a.start_time,
        end_time=a.end_time,
        kart_availability=[KartAvailabilityOut(**asdict(k)) for k in a.kart_availability],
        total_availability=a.total_availability,
        total_booked=a.total_booked,
        total_karts=a.total_karts,
    )


@router.get("/timeslots", response_model=list[TimeslotOut])
def get_available_timeslots(
    date: date = Query(...),
    service: BookingService = Depends(get_booking_service),
):
    return [_timeslot_out(a) for a in service.timeslots(date)]


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(payload: BookingCreate, service: BookingService = Depends(get_booking_service)):
    request = BookingRequest(
        customer=Customer(name=payload.customer_name, email=str(payload.customer_email), phone=payload.customer_phone),
        date=payload.date,
        selected_timeslots=payload.selected_timeslots,
        kart_selections=[KartRequest(kart_id=s.kart_id, quantity=s.quantity, timeslot=s.timeslot) for s in payload.kart_selections],
        notes=payload.notes,
    )
    return service.create_booking(request)


@router.get("", response_model=list[BookingOut])
def list_bookings(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status: BookingStatus | None = None,
    service: BookingService = Depends(get_booking_service),
    user=Depends(require_admin),
):
    return service.gateway.list(start_date=start_date, end_date=end_date, status=status)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service), user=Depends(require_admin)):
    return service.gateway.get(booking_id)


@router.put("/{booking_id}", response_model=BookingOut)
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
    user=Depends(require_admin),
):
    return service.gateway.update(booking_id, payload.dict(exclude_unset=True))


@router.delete("/{booking_id}")
def delete_booking(booking_id: str, service: BookingService = Depends(get_booking_service), user=Depends(require_admin)):
    service.gateway.delete(booking_id)
    return {"message": "Booking removed"}
