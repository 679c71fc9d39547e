import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from pydantic import ValidationError

from ..config import settings
from ..db import get_gallery_store
from ..errors import InvalidCursorError
from ..gallery.query import PageCursor, build_query
from ..gallery.showcase import SHOWCASE_ITEMS
from ..gallery.store import GalleryStore
from ..models.gallery_model import ALL_CATEGORIES, GalleryFilter, GalleryPageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gallery", tags=["Gallery"])


def _parse_filter(category: str, search: str, sort_by: str, direction: str) -> GalleryFilter:
    try:
        return GalleryFilter(
            category=category.strip().lower(),
            search_query=search,
            sort_by=sort_by,
            sort_direction=direction,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()],
        )


async def record_view(store: GalleryStore, item_id: str) -> None:
    try:
        await store.increment_views(item_id)
    except Exception:
        logger.exception(f"View count increment failed for {item_id}")


@router.get("/", response_model=GalleryPageOut)
async def list_gallery(
    category: str = Query(default=ALL_CATEGORIES),
    search: str = Query(default=""),
    sort_by: str = Query(default="recent"),
    direction: str = Query(default="desc"),
    cursor: str | None = Query(default=None),
    limit: int = Query(default=settings.GALLERY_PAGE_SIZE, ge=1, le=settings.GALLERY_MAX_PAGE_SIZE),
    store: GalleryStore = Depends(get_gallery_store),
):
    """
    One page of gallery items for the given filter.
    Pass next_cursor back as `cursor` (with the same filter) for the next page.
    """
    gallery_filter = _parse_filter(category, search, sort_by, direction)
    page_cursor = PageCursor.decode(cursor) if cursor else None
    if page_cursor is not None and not page_cursor.matches(gallery_filter):
        # cursor from a different sort field or direction
        raise InvalidCursorError(cursor)

    page = await store.query(build_query(gallery_filter, page_cursor, limit))

    # Empty gallery: show the showcase set instead of a blank page
    if page.fetched == 0 and page_cursor is None and gallery_filter == GalleryFilter():
        return GalleryPageOut(items=SHOWCASE_ITEMS[:limit], next_cursor=None, has_more=False)

    has_more = page.fetched == limit
    next_cursor = page.next_cursor.encode() if page.next_cursor and has_more else None
    return GalleryPageOut(items=page.items, next_cursor=next_cursor, has_more=has_more)


@router.post("/{item_id}/views", status_code=status.HTTP_202_ACCEPTED)
async def add_view(
    item_id: str,
    background_tasks: BackgroundTasks,
    store: GalleryStore = Depends(get_gallery_store),
):
    """Count one view. Fire-and-forget: always accepted, failures only logged."""
    background_tasks.add_task(record_view, store, item_id)
    return {"ok": True}
