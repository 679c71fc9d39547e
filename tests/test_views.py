import logging

import pytest

from reeves.errors import StoreError
from reeves.gallery.views import ViewCountEmitter

from conftest import InMemoryGalleryStore, make_item


class BrokenStore(InMemoryGalleryStore):
    async def increment_views(self, item_id):
        raise StoreError("write rejected")


@pytest.mark.asyncio
async def test_each_open_counts_a_view():
    store = InMemoryGalleryStore([make_item(1, views=4)])
    emitter = ViewCountEmitter(store)

    emitter.increment("item-001")
    emitter.increment("item-001")
    await emitter.drain()

    assert store.viewed == ["item-001", "item-001"]
    assert (await store.get("item-001")).views == 6
    assert emitter.pending == 0


@pytest.mark.asyncio
async def test_increment_returns_before_the_write_completes():
    store = InMemoryGalleryStore([make_item(1)])
    emitter = ViewCountEmitter(store)

    emitter.increment("item-001")

    assert emitter.pending == 1
    assert store.viewed == []
    await emitter.drain()
    assert store.viewed == ["item-001"]


@pytest.mark.asyncio
async def test_failures_are_logged_not_raised(caplog):
    emitter = ViewCountEmitter(BrokenStore())

    with caplog.at_level(logging.ERROR, logger="reeves.gallery.views"):
        emitter.increment("item-404")
        await emitter.drain()

    assert "View count increment failed for item-404" in caplog.text


@pytest.mark.asyncio
async def test_unknown_item_is_swallowed():
    emitter = ViewCountEmitter(InMemoryGalleryStore())

    emitter.increment("missing")
    await emitter.drain()

    assert emitter.pending == 0


def test_without_event_loop_the_view_is_dropped(caplog):
    store = InMemoryGalleryStore([make_item(1)])
    emitter = ViewCountEmitter(store)

    with caplog.at_level(logging.WARNING, logger="reeves.gallery.views"):
        emitter.increment("item-001")

    assert emitter.pending == 0
    assert "dropping view for item-001" in caplog.text
