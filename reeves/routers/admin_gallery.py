import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from ..db import get_gallery_store
from ..gallery.store import MongoGalleryStore
from ..models.gallery_model import (
    GalleryItem,
    GalleryItemCreate,
    GalleryItemUpdate,
    MediaType,
)
from ..services.auth_service import admin_from_token, get_current_admin
from ..services.uploads import get_uploader, resource_type_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/gallery", tags=["Admin Gallery"])


@router.get("/", response_model=List[GalleryItem])
async def list_items(
    admin=Depends(get_current_admin),
    store: MongoGalleryStore = Depends(get_gallery_store),
):
    return await store.list_all()


@router.post("/", response_model=GalleryItem, status_code=status.HTTP_201_CREATED)
async def upload_item(
    file: UploadFile = File(...),
    category: str = Form(...),
    title: str | None = Form(None),
    description: str | None = Form(None),
    type: str | None = Form(None),
    tags: str | None = Form(None),
    featured: bool = Form(False),
    admin=Depends(get_current_admin),
    store: MongoGalleryStore = Depends(get_gallery_store),
    upload=Depends(get_uploader),
):
    """
    Upload a file to the media host, then record it in the gallery.
    Nothing is written when the upload fails.
    """
    media_type = type or resource_type_for(file.content_type)
    try:
        data = GalleryItemCreate(
            url="pending",
            type=MediaType(media_type),
            category=category,
            tags=tags or [],
            title=title or None,
            description=description or None,
            featured=featured,
        )
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    content = await file.read()
    url = await upload(content, file.filename or "upload", file.content_type)

    item = await store.create(data.model_copy(update={"url": url}))
    logger.info(f"{admin['email']} uploaded gallery item {item.id}")
    return item


@router.patch("/{item_id}", response_model=GalleryItem)
async def edit_item(
    item_id: str,
    changes: GalleryItemUpdate,
    admin=Depends(get_current_admin),
    store: MongoGalleryStore = Depends(get_gallery_store),
):
    return await store.update(item_id, changes)


@router.delete("/{item_id}", response_model=dict)
async def delete_item(
    item_id: str,
    admin=Depends(get_current_admin),
    store: MongoGalleryStore = Depends(get_gallery_store),
):
    await store.delete(item_id)
    logger.info(f"{admin['email']} deleted gallery item {item_id}")
    return {"ok": True, "id": item_id}


@router.websocket("/live")
async def live_items(
    websocket: WebSocket,
    token: str | None = None,
    store: MongoGalleryStore = Depends(get_gallery_store),
):
    """Full gallery list on connect and after every change, until disconnect."""
    if admin_from_token(token) is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    async def push(items):
        await websocket.send_json([item.model_dump(mode="json") for item in items])

    subscription = store.subscribe(push)
    try:
        await subscription.start()
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Admin gallery live listing disconnected")
    finally:
        await subscription.close()
