import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, WebSocket, WebSocketDisconnect, status

from ..db import get_reservation_store
from ..models.reservation_model import Reservation, ReservationStatus, ReservationStatusUpdate
from ..services.auth_service import admin_from_token, get_current_admin
from ..services.mailer import get_mailer
from ..services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/reservations", tags=["Admin Reservations"])


@router.get("/", response_model=List[Reservation])
async def list_reservations(
    status: ReservationStatus | None = Query(default=None),
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_reservation_store),
):
    return await store.list(status.value if status else None)


@router.patch("/{reservation_id}/status", response_model=Reservation)
async def update_status(
    reservation_id: str,
    update: ReservationStatusUpdate,
    background_tasks: BackgroundTasks,
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_reservation_store),
    send_confirmation=Depends(get_mailer),
):
    """Confirming a reservation emails the guest once the response is sent."""
    reservation = await store.set_status(reservation_id, update.status.value)
    logger.info(f"{admin['email']} set reservation {reservation_id} to {update.status.value}")
    if update.status == ReservationStatus.CONFIRMED:
        background_tasks.add_task(send_confirmation, reservation)
    return reservation


@router.delete("/{reservation_id}", response_model=dict)
async def delete_reservation(
    reservation_id: str,
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_reservation_store),
):
    await store.delete(reservation_id)
    return {"ok": True, "id": reservation_id}


@router.websocket("/live")
async def live_reservations(
    websocket: WebSocket,
    token: str | None = None,
    store: RecordStore = Depends(get_reservation_store),
):
    if admin_from_token(token) is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    async def push(reservations):
        await websocket.send_json([r.model_dump(mode="json") for r in reservations])

    subscription = store.subscribe(push)
    try:
        await subscription.start()
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Admin reservations live listing disconnected")
    finally:
        await subscription.close()
