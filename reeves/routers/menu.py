import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from redis.exceptions import RedisError

from ..config import settings
from ..db import get_menu_store
from ..models.menu_model import MenuCategory, MenuListOut
from ..redis_client import redis_client
from ..services.menu_store import MenuStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu", tags=["Menu"])

# Cache configuration
LIST_CACHE_KEY = "menu:list"


def get_cache():
    return redis_client


def _get_cache_key(category: str | None) -> str:
    if category:
        return f"{LIST_CACHE_KEY}:category:{category}"
    return LIST_CACHE_KEY


# ---------- Cache invalidation helper ----------
async def invalidate_menu_cache(cache) -> None:
    """Drop every cached menu listing. A cache outage is logged, not raised."""
    keys = [LIST_CACHE_KEY] + [_get_cache_key(c.value) for c in MenuCategory]
    try:
        await cache.delete(*keys)
    except RedisError as e:
        logger.warning(f"Menu cache invalidation failed: {e}")


def _parse_category(category: str) -> str | None:
    cleaned = category.strip().rstrip(",").lower()
    if cleaned in ("", "all"):
        return None
    try:
        return MenuCategory(cleaned).value
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown menu category: {category}")


# ---------- Routes ----------

@router.get("/", response_model=MenuListOut)
async def list_menu(
    category: str = Query(default="all"),
    store: MenuStore = Depends(get_menu_store),
    cache=Depends(get_cache),
):
    """
    Return menu items, optionally filtered by category, plus the category
    list for the filter bar. Cached in Redis until an admin edit.
    """
    selected = _parse_category(category)
    cache_key = _get_cache_key(selected)

    # Try cache
    try:
        cached = await cache.get(cache_key)
    except RedisError as e:
        logger.warning(f"Menu cache read failed: {e}")
        cached = None
    if cached:
        logger.debug(f"Cache hit for {cache_key}")
        return MenuListOut.model_validate_json(cached)

    # Cache miss: query database
    items = await store.list_items(selected)
    categories = ["all"] + await store.categories()
    result = MenuListOut(categories=categories, items=items)

    try:
        await cache.setex(cache_key, settings.MENU_CACHE_TTL, result.model_dump_json())
    except RedisError as e:
        logger.warning(f"Menu cache write failed: {e}")
    return result
