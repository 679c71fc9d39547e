"""
Tests for admin login and the admin gallery and menu endpoints.
"""
import asyncio
from unittest.mock import MagicMock

import pytest
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.websockets import WebSocketDisconnect

from reeves.config import settings
from reeves.db import get_admin_collection, get_gallery_store, get_menu_store
from reeves.errors import ItemNotFoundError, UploadError
from reeves.live import Subscription
from reeves.models.menu_model import MenuItem
from reeves.routers.menu import LIST_CACHE_KEY, get_cache
from reeves.services.uploads import get_uploader
from reeves.utils import create_admin_token, hash_password

from conftest import InMemoryGalleryStore, make_item


class FakeMenuStore:
    def __init__(self, items=()):
        self.items = list(items)
        self.list_calls = 0

    async def list_items(self, category=None):
        self.list_calls += 1
        rows = [i for i in self.items if category is None or i.category.value == category]
        return sorted(rows, key=lambda i: (i.category.value, i.name))

    async def categories(self):
        return sorted({i.category.value for i in self.items})

    async def create(self, data):
        item = MenuItem(id=f"menu-{len(self.items) + 1}", **data.model_dump())
        self.items.append(item)
        return item

    async def update(self, item_id, data):
        for n, item in enumerate(self.items):
            if item.id == item_id:
                self.items[n] = MenuItem(id=item_id, **data.model_dump())
                return self.items[n]
        raise ItemNotFoundError("menu_items", item_id)

    async def delete(self, item_id):
        for item in self.items:
            if item.id == item_id:
                self.items.remove(item)
                return
        raise ItemNotFoundError("menu_items", item_id)


class LiveGalleryStore(InMemoryGalleryStore):
    def subscribe(self, on_snapshot):
        async def no_changes():
            await asyncio.Event().wait()

        return Subscription(self.list_all, no_changes, on_snapshot)


class BrokenCache:
    async def get(self, key):
        raise RedisConnectionError("redis down")

    async def setex(self, key, ttl, value):
        raise RedisConnectionError("redis down")

    async def delete(self, *keys):
        raise RedisConnectionError("redis down")


def menu_item(n, name, category, price=10.0):
    return MenuItem(id=f"menu-{n}", name=name, description=f"{name} description", price=price, category=category)


@pytest.fixture
def menu_store(override):
    store = FakeMenuStore([
        menu_item(1, "Burrata", "appetizers", 14),
        menu_item(2, "Short Rib", "mains", 32),
        menu_item(3, "Affogato", "desserts", 8),
    ])
    override(get_menu_store, store)
    return store


# ---------- auth ----------

class TestLogin:
    @pytest.fixture
    def admins(self, override):
        collection = MagicMock()
        collection.find_one.return_value = {
            "email": "chef@reevesdining.com",
            "hashed_password": hash_password("mise-en-place"),
        }
        override(get_admin_collection, collection)
        return collection

    def test_login_returns_admin_token(self, client, admins):
        resp = client.post("/auth/login", json={"email": "Chef@ReevesDining.com", "password": "mise-en-place"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["email"] == "chef@reevesdining.com"
        admins.find_one.assert_called_once_with({"email": "chef@reevesdining.com"})

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json() == {"email": "chef@reevesdining.com"}

    def test_wrong_password(self, client, admins):
        resp = client.post("/auth/login", json={"email": "chef@reevesdining.com", "password": "nope"})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials. Please try again."

    def test_unknown_admin(self, client, admins):
        admins.find_one.return_value = None

        resp = client.post("/auth/login", json={"email": "guest@reevesdining.com", "password": "x"})

        assert resp.status_code == 401


def test_admin_routes_require_a_token(client):
    assert client.get("/admin/gallery/").status_code == 401
    assert client.delete("/admin/menu/menu-1").status_code == 401


def test_expired_token_is_rejected(client):
    token = create_admin_token("chef@reevesdining.com", minutes=-5)

    resp = client.get("/admin/gallery/", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_non_admin_token_is_forbidden(client):
    token = jwt.encode(
        {"sub": "guest@reevesdining.com", "role": "viewer"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    resp = client.get("/admin/gallery/", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 403


# ---------- admin gallery ----------

def test_admin_lists_every_item_newest_first(client, admin_headers):
    resp = client.get("/admin/gallery/", headers=admin_headers)

    assert resp.status_code == 200
    ids = [item["id"] for item in resp.json()]
    assert len(ids) == 20
    assert ids[0] == "item-020"


def test_upload_creates_item_with_hosted_url(client, admin_headers, gallery_store, uploads):
    resp = client.post(
        "/admin/gallery/",
        headers=admin_headers,
        files={"file": ("tagliatelle.jpg", b"jpeg-bytes", "image/jpeg")},
        data={"category": "food", "title": "Truffle tagliatelle", "tags": "Pasta, truffle"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["url"] == "https://res.cloudinary.com/demo/image/upload/tagliatelle.jpg"
    assert body["type"] == "image"
    assert body["tags"] == ["pasta", "truffle"]
    assert body["views"] == 0
    assert uploads.uploaded == [("tagliatelle.jpg", "image/jpeg", b"jpeg-bytes")]
    assert gallery_store.items[-1].id == body["id"]


def test_upload_detects_video_from_content_type(client, admin_headers):
    resp = client.post(
        "/admin/gallery/",
        headers=admin_headers,
        files={"file": ("service.mp4", b"mp4", "video/mp4")},
        data={"category": "behind_scenes"},
    )

    assert resp.status_code == 201
    assert resp.json()["type"] == "video"


def test_upload_with_invalid_category_uploads_nothing(client, admin_headers, gallery_store, uploads):
    resp = client.post(
        "/admin/gallery/",
        headers=admin_headers,
        files={"file": ("x.jpg", b"x", "image/jpeg")},
        data={"category": "all"},
    )

    assert resp.status_code == 422
    assert uploads.uploaded == []
    assert len(gallery_store.items) == 20


def test_failed_upload_writes_nothing(client, admin_headers, gallery_store, override):
    async def failing_upload(content, filename, content_type):
        raise UploadError("Upload failed: 500")

    override(get_uploader, failing_upload)

    resp = client.post(
        "/admin/gallery/",
        headers=admin_headers,
        files={"file": ("x.jpg", b"x", "image/jpeg")},
        data={"category": "food"},
    )

    assert resp.status_code == 502
    assert resp.json()["error_code"] == "UPLOAD_FAILED"
    assert len(gallery_store.items) == 20


def test_patch_edits_metadata_only(client, admin_headers, gallery_store):
    resp = client.patch(
        "/admin/gallery/item-003",
        headers=admin_headers,
        json={"title": "Chef's table", "featured": True, "views": 999},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Chef's table"
    assert body["featured"] is True
    assert body["views"] == 0


def test_delete_item(client, admin_headers, gallery_store):
    resp = client.delete("/admin/gallery/item-003", headers=admin_headers)

    assert resp.json() == {"ok": True, "id": "item-003"}
    assert "item-003" not in [item.id for item in gallery_store.items]


def test_delete_unknown_item_is_404(client, admin_headers):
    resp = client.delete("/admin/gallery/nope", headers=admin_headers)

    assert resp.status_code == 404
    assert resp.json()["error_code"] == "ITEM_NOT_FOUND"


def test_live_listing_requires_admin_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/admin/gallery/live"):
            pass

    assert exc_info.value.code == 1008


def test_live_listing_pushes_snapshot(client, override):
    override(get_gallery_store, LiveGalleryStore([make_item(1), make_item(2)]))
    token = create_admin_token("chef@reevesdining.com")

    with client.websocket_connect(f"/admin/gallery/live?token={token}") as ws:
        snapshot = ws.receive_json()

    assert [item["id"] for item in snapshot] == ["item-002", "item-001"]


# ---------- menu ----------

def test_public_menu_lists_categories_and_items(client, menu_store):
    body = client.get("/menu/").json()

    assert body["categories"] == ["all", "appetizers", "desserts", "mains"]
    assert [item["name"] for item in body["items"]] == ["Burrata", "Affogato", "Short Rib"]


def test_public_menu_filters_by_category(client, menu_store):
    body = client.get("/menu/", params={"category": "Desserts"}).json()

    assert [item["name"] for item in body["items"]] == ["Affogato"]


def test_public_menu_rejects_unknown_category(client, menu_store):
    assert client.get("/menu/", params={"category": "brunch"}).status_code == 422


def test_public_menu_is_cached(client, menu_store, cache):
    client.get("/menu/")
    client.get("/menu/")

    assert menu_store.list_calls == 1
    assert LIST_CACHE_KEY in cache.data


def test_menu_still_served_when_cache_is_down(client, menu_store, override):
    override(get_cache, BrokenCache())

    resp = client.get("/menu/")

    assert resp.status_code == 200
    assert len(resp.json()["items"]) == 3


def test_admin_create_invalidates_cache(client, admin_headers, menu_store, cache):
    client.get("/menu/")

    resp = client.post(
        "/admin/menu/",
        headers=admin_headers,
        data={"name": "Negroni", "description": "Gin, Campari, vermouth", "price": "13", "category": "beverages"},
    )

    assert resp.status_code == 201
    assert LIST_CACHE_KEY not in cache.data
    names = [item["name"] for item in client.get("/menu/").json()["items"]]
    assert "Negroni" in names
    assert menu_store.list_calls == 2


def test_admin_create_with_image_upload(client, admin_headers, menu_store, uploads):
    resp = client.post(
        "/admin/menu/",
        headers=admin_headers,
        data={
            "name": "Crudo",
            "description": "Citrus, chili",
            "price": "16",
            "category": "appetizers",
            "image": "https://old.example/crudo.jpg",
        },
        files={"image_file": ("crudo.jpg", b"jpeg", "image/jpeg")},
    )

    assert resp.status_code == 201
    assert resp.json()["image"] == "https://res.cloudinary.com/demo/image/upload/crudo.jpg"


def test_admin_create_rejects_negative_price(client, admin_headers, menu_store):
    resp = client.post(
        "/admin/menu/",
        headers=admin_headers,
        data={"name": "Water", "description": "Still", "price": "-1", "category": "beverages"},
    )

    assert resp.status_code == 422
    assert len(menu_store.items) == 3


def test_admin_update_and_delete(client, admin_headers, menu_store, cache):
    resp = client.put(
        "/admin/menu/menu-2",
        headers=admin_headers,
        data={"name": "Short Rib", "description": "Braised", "price": "34", "category": "mains"},
    )
    assert resp.status_code == 200
    assert resp.json()["price"] == 34

    client.get("/menu/")
    resp = client.delete("/admin/menu/menu-2", headers=admin_headers)

    assert resp.json() == {"ok": True, "id": "menu-2"}
    assert cache.data == {}
    assert [item.id for item in menu_store.items] == ["menu-1", "menu-3"]


def test_admin_menu_edit_survives_cache_outage(client, admin_headers, menu_store, override):
    override(get_cache, BrokenCache())

    resp = client.delete("/admin/menu/menu-1", headers=admin_headers)

    assert resp.status_code == 200
