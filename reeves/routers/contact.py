from fastapi import APIRouter, Depends, status

from ..db import get_contact_store
from ..models.contact_model import ContactIn, ContactMessage
from ..services.record_store import RecordStore

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post("/", response_model=ContactMessage, status_code=status.HTTP_201_CREATED)
async def send_message(
    data: ContactIn,
    store: RecordStore = Depends(get_contact_store),
):
    return await store.create(data)
