import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from ..db import get_menu_store
from ..models.menu_model import MenuItem, MenuItemIn
from ..services.auth_service import admin_from_token, get_current_admin
from ..services.menu_store import MenuStore
from ..services.uploads import get_uploader
from .menu import get_cache, invalidate_menu_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/menu", tags=["Admin Menu"])


async def _menu_data(name, description, price, category, image, image_file, upload) -> MenuItemIn:
    """Validate the form and upload the optional image file, which wins over an image URL."""
    try:
        data = MenuItemIn(
            name=name,
            description=description,
            price=price,
            category=category,
            image=image or None,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if image_file is not None and image_file.filename:
        content = await image_file.read()
        url = await upload(content, image_file.filename, image_file.content_type)
        data = data.model_copy(update={"image": url})
    return data


@router.get("/", response_model=List[MenuItem])
async def list_items(
    admin=Depends(get_current_admin),
    store: MenuStore = Depends(get_menu_store),
):
    return await store.list_items()


@router.post("/", response_model=MenuItem, status_code=status.HTTP_201_CREATED)
async def create_item(
    name: str = Form(...),
    description: str = Form(...),
    price: float = Form(...),
    category: str = Form(...),
    image: str | None = Form(None),
    image_file: UploadFile | None = File(None),
    admin=Depends(get_current_admin),
    store: MenuStore = Depends(get_menu_store),
    upload=Depends(get_uploader),
    cache=Depends(get_cache),
):
    data = await _menu_data(name, description, price, category, image, image_file, upload)
    item = await store.create(data)
    await invalidate_menu_cache(cache)
    return item


@router.put("/{item_id}", response_model=MenuItem)
async def update_item(
    item_id: str,
    name: str = Form(...),
    description: str = Form(...),
    price: float = Form(...),
    category: str = Form(...),
    image: str | None = Form(None),
    image_file: UploadFile | None = File(None),
    admin=Depends(get_current_admin),
    store: MenuStore = Depends(get_menu_store),
    upload=Depends(get_uploader),
    cache=Depends(get_cache),
):
    data = await _menu_data(name, description, price, category, image, image_file, upload)
    item = await store.update(item_id, data)
    await invalidate_menu_cache(cache)
    return item


@router.delete("/{item_id}", response_model=dict)
async def delete_item(
    item_id: str,
    admin=Depends(get_current_admin),
    store: MenuStore = Depends(get_menu_store),
    cache=Depends(get_cache),
):
    await store.delete(item_id)
    await invalidate_menu_cache(cache)
    return {"ok": True, "id": item_id}


@router.websocket("/live")
async def live_items(
    websocket: WebSocket,
    token: str | None = None,
    store: MenuStore = Depends(get_menu_store),
):
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
        logger.info("Admin menu live listing disconnected")
    finally:
        await subscription.close()
