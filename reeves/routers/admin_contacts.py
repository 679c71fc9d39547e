from typing import List

from fastapi import APIRouter, Depends, Query

from ..db import get_contact_store
from ..models.contact_model import ContactMessage, ContactStatus, ContactStatusUpdate
from ..services.auth_service import get_current_admin
from ..services.record_store import RecordStore

router = APIRouter(prefix="/admin/contacts", tags=["Admin Contacts"])


@router.get("/", response_model=List[ContactMessage])
async def list_messages(
    status: ContactStatus | None = Query(default=None),
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_contact_store),
):
    return await store.list(status.value if status else None)


@router.patch("/{message_id}/status", response_model=ContactMessage)
async def update_status(
    message_id: str,
    update: ContactStatusUpdate,
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_contact_store),
):
    return await store.set_status(message_id, update.status.value)


@router.delete("/{message_id}", response_model=dict)
async def delete_message(
    message_id: str,
    admin=Depends(get_current_admin),
    store: RecordStore = Depends(get_contact_store),
):
    await store.delete(message_id)
    return {"ok": True, "id": message_id}
