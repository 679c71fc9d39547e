"""
GalleryStore backed by the public Reeves HTTP API.

Lets the pagination and lightbox controllers run outside the service (a
kiosk display, a script, the test-suite) against a deployed instance.
"""

import logging

import httpx

from .errors import ReevesError, StoreError
from .gallery.query import OP_ARRAY_CONTAINS, OP_EQUALS, SORT_FIELDS, PageCursor, StoreQuery
from .gallery.store import GalleryStore, Page
from .models.gallery_model import ALL_CATEGORIES, GalleryPageOut
from .services.network import fetch_with_retry, fetch_with_timeout

logger = logging.getLogger(__name__)

_SORT_BY_FIELD = {field: sort_by for sort_by, field in SORT_FIELDS.items()}


def query_params(query: StoreQuery) -> dict:
    params = {
        "category": ALL_CATEGORIES,
        "search": "",
        "sort_by": _SORT_BY_FIELD[query.order_by.field],
        "direction": query.order_by.direction,
        "limit": query.limit,
    }
    for constraint in query.filters:
        if constraint.field == "category" and constraint.op == OP_EQUALS:
            params["category"] = constraint.value
        elif constraint.field == "tags" and constraint.op == OP_ARRAY_CONTAINS:
            params["search"] = constraint.value
        else:
            raise ValueError(f"API cannot express filter {constraint}")
    if query.start_after is not None:
        params["cursor"] = query.start_after.encode()
    return params


class HttpGalleryStore(GalleryStore):
    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        retries: int = 3,
        timeout: float = 10.0,
        retry_delay: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient()
        self.retries = retries
        self.timeout = timeout
        self.retry_delay = retry_delay

    async def query(self, query: StoreQuery) -> Page:
        url = f"{self.base_url}/gallery/"
        try:
            resp = await fetch_with_retry(
                self.client,
                "GET",
                url,
                retries=self.retries,
                timeout=self.timeout,
                retry_delay=self.retry_delay,
                params=query_params(query),
            )
            resp.raise_for_status()
            page = GalleryPageOut.model_validate_json(resp.content)
            next_cursor = PageCursor.decode(page.next_cursor) if page.next_cursor else None
        except (httpx.HTTPError, ReevesError, ValueError) as exc:
            raise StoreError(f"Gallery API query failed: {exc}", details={"url": url}) from exc

        # the API decides has_more from the raw page, which may include skipped documents
        if page.has_more:
            fetched = query.limit
        else:
            fetched = min(len(page.items), query.limit - 1)
        return Page(items=page.items, next_cursor=next_cursor, fetched=fetched)

    async def increment_views(self, item_id: str) -> None:
        # not idempotent, so a single attempt
        url = f"{self.base_url}/gallery/{item_id}/views"
        try:
            resp = await fetch_with_timeout(self.client, "POST", url, timeout=self.timeout)
            resp.raise_for_status()
        except (httpx.HTTPError, ReevesError) as exc:
            raise StoreError(f"View increment failed: {exc}", details={"url": url}) from exc

    async def aclose(self) -> None:
        await self.client.aclose()
