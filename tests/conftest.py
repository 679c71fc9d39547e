from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List

import pytest
from fastapi.testclient import TestClient

from reeves.db import get_gallery_store
from reeves.errors import ItemNotFoundError
from reeves.gallery.query import OP_ARRAY_CONTAINS, OP_EQUALS, PageCursor, StoreQuery
from reeves.gallery.store import GalleryStore, Page
from reeves.main import app
from reeves.models.gallery_model import GalleryItem, GalleryItemCreate, GalleryItemUpdate, utcnow
from reeves.routers.menu import get_cache
from reeves.services.uploads import get_uploader
from reeves.utils import create_admin_token

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_item(n: int, **overrides) -> GalleryItem:
    data = {
        "id": f"item-{n:03d}",
        "url": f"https://cdn.example.com/reeves/{n}.jpg",
        "type": "image",
        "category": "food",
        "tags": [],
        "title": f"Item {n}",
        "uploaded_at": BASE_TIME + timedelta(minutes=n),
        "views": 0,
    }
    data.update(overrides)
    return GalleryItem(**data)


def _plain(value):
    return value.value if isinstance(value, Enum) else value


class InMemoryGalleryStore(GalleryStore):
    """Executes StoreQuery the way the Mongo store does, over a list."""

    def __init__(self, items: List[GalleryItem] = ()):
        self.items = list(items)
        self.queries: List[StoreQuery] = []
        self.viewed: List[str] = []

    def _matches(self, item, constraint) -> bool:
        value = _plain(getattr(item, constraint.field))
        if constraint.op == OP_EQUALS:
            return value == constraint.value
        if constraint.op == OP_ARRAY_CONTAINS:
            return constraint.value in value
        raise ValueError(constraint.op)

    async def query(self, query: StoreQuery) -> Page:
        self.queries.append(query)
        field = query.order_by.field
        desc = query.order_by.descending

        def key(item):
            return (_plain(getattr(item, field)), item.id)

        rows = [i for i in self.items if all(self._matches(i, c) for c in query.filters)]
        rows.sort(key=key, reverse=desc)
        if query.start_after is not None:
            mark = (query.start_after.value, query.start_after.item_id)
            rows = [i for i in rows if (key(i) < mark if desc else key(i) > mark)]
        rows = rows[: query.limit]
        next_cursor = PageCursor.after(rows[-1], field, query.order_by.direction) if rows else None
        return Page(items=rows, next_cursor=next_cursor)

    async def increment_views(self, item_id: str) -> None:
        for i, item in enumerate(self.items):
            if item.id == item_id:
                self.items[i] = item.model_copy(update={"views": item.views + 1})
                self.viewed.append(item_id)
                return
        raise ItemNotFoundError("gallery", item_id)

    async def list_all(self):
        return sorted(self.items, key=lambda i: (i.uploaded_at, i.id), reverse=True)

    async def get(self, item_id):
        for item in self.items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError("gallery", item_id)

    async def create(self, data: GalleryItemCreate):
        item = GalleryItem(
            id=f"new-{len(self.items) + 1:03d}",
            uploaded_at=utcnow(),
            views=0,
            **data.model_dump(),
        )
        self.items.append(item)
        return item

    async def update(self, item_id, changes: GalleryItemUpdate):
        item = await self.get(item_id)
        updated = item.model_copy(update=changes.model_dump(exclude_unset=True, exclude_none=True))
        self.items[self.items.index(item)] = updated
        return updated

    async def delete(self, item_id):
        item = await self.get(item_id)
        self.items.remove(item)


class SkippingStore(InMemoryGalleryStore):
    """Drops the first row of every page, as if it failed to parse."""

    async def query(self, query):
        page = await super().query(query)
        return Page(items=page.items[1:], next_cursor=page.next_cursor, fetched=page.fetched)


class FakeCache:
    """Async stand-in for the redis client."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)


@pytest.fixture
def gallery_store():
    return InMemoryGalleryStore([make_item(n) for n in range(1, 21)])


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def uploads():
    uploaded = []

    async def fake_upload(content, filename, content_type):
        uploaded.append((filename, content_type, content))
        return f"https://res.cloudinary.com/demo/image/upload/{filename}"

    fake_upload.uploaded = uploaded
    return fake_upload


@pytest.fixture
def client(gallery_store, cache, uploads) -> TestClient:
    """
    A test client for the FastAPI application with every external
    collaborator replaced by an in-memory fake.
    """
    app.dependency_overrides[get_gallery_store] = lambda: gallery_store
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_uploader] = lambda: uploads
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_admin_token('chef@reevesdining.com')}"}


@pytest.fixture
def override():
    """Register an extra dependency override for the duration of a test."""

    def _override(dependency, value):
        app.dependency_overrides[dependency] = lambda: value

    return _override


