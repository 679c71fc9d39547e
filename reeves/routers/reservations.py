from fastapi import APIRouter, Depends, HTTPException, status

from ..config import settings
from ..db import get_reservation_store
from ..models.reservation_model import SEATING_TIMES, Reservation, ReservationIn, outside_booking_window
from ..services.record_store import RecordStore

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.get("/times", response_model=list[str])
async def seating_times():
    return SEATING_TIMES


@router.post("/", response_model=Reservation, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationIn,
    store: RecordStore = Depends(get_reservation_store),
):
    """Guest booking request. Starts out pending until the restaurant confirms it."""
    if outside_booking_window(data.date, settings.RESERVATION_WINDOW_DAYS):
        raise HTTPException(
            status_code=422,
            detail=f"Reservations can be made up to {settings.RESERVATION_WINDOW_DAYS} days ahead",
        )
    return await store.create(data)
