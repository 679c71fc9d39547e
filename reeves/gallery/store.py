import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..errors import ItemNotFoundError, StoreError
from ..live import Subscription, change_stream_waiter
from ..models.gallery_model import (
    GalleryItem,
    GalleryItemCreate,
    GalleryItemUpdate,
    MediaCategory,
    utcnow,
)
from .query import OP_ARRAY_CONTAINS, OP_EQUALS, PageCursor, StoreQuery

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of results.

    `fetched` is how many documents the store returned for the page, before
    any were skipped as unreadable; it decides whether more pages exist.
    """

    items: List[GalleryItem] = field(default_factory=list)
    next_cursor: Optional[PageCursor] = None
    fetched: Optional[int] = None

    def __post_init__(self):
        if self.fetched is None:
            self.fetched = len(self.items)


class GalleryStore(ABC):
    """Read side of the remote media store used by the gallery controllers."""

    @abstractmethod
    async def query(self, query: StoreQuery) -> Page:
        ...

    @abstractmethod
    async def increment_views(self, item_id: str) -> None:
        ...


def _object_id(item_id: str):
    try:
        return ObjectId(item_id)
    except (InvalidId, TypeError):
        # ids created outside this service (seeded/imported) may be plain strings
        return item_id


def to_mongo_filter(query: StoreQuery) -> dict:
    """Build the find() predicate for a query, including the keyset continuation."""
    clauses = []
    for constraint in query.filters:
        if constraint.op in (OP_EQUALS, OP_ARRAY_CONTAINS):
            # an equality on an array field matches any element
            clauses.append({constraint.field: constraint.value})
        else:
            raise ValueError(f"Unsupported filter operator: {constraint.op}")

    cursor = query.start_after
    if cursor is not None:
        op = "$lt" if query.order_by.descending else "$gt"
        clauses.append({
            "$or": [
                {cursor.field: {op: cursor.value}},
                {cursor.field: cursor.value, "_id": {op: _object_id(cursor.item_id)}},
            ]
        })

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def to_mongo_sort(query: StoreQuery) -> list:
    direction = DESCENDING if query.order_by.descending else ASCENDING
    # _id breaks ties so keyset pagination never skips or repeats equal values
    return [(query.order_by.field, direction), ("_id", direction)]


def document_to_item(doc: dict) -> GalleryItem:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    data.setdefault("tags", [])
    data["views"] = max(int(data.get("views") or 0), 0)
    try:
        data["category"] = MediaCategory(data.get("category"))
    except ValueError:
        data["category"] = None
    return GalleryItem.model_validate(data)


class MongoGalleryStore(GalleryStore):
    """GalleryStore over a pymongo collection.

    pymongo is blocking, so each call runs on a worker thread to keep the
    event loop responsive.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    async def _run(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except PyMongoError as exc:
            raise StoreError(
                f"Gallery store call failed: {exc}",
                details={"collection": self.collection.name},
            ) from exc

    def _convert(self, docs) -> List[GalleryItem]:
        items = []
        for doc in docs:
            try:
                items.append(document_to_item(doc))
            except ValidationError as exc:
                logger.warning(f"Skipping malformed gallery document {doc.get('_id')}: {exc}")
        return items

    def _find(self, query: StoreQuery) -> list:
        return list(
            self.collection.find(to_mongo_filter(query))
            .sort(to_mongo_sort(query))
            .limit(query.limit)
        )

    async def query(self, query: StoreQuery) -> Page:
        docs = await self._run(self._find, query)
        items = self._convert(docs)
        next_cursor = None
        if docs:
            # continue after the last document read, even one skipped as malformed
            last = docs[-1]
            next_cursor = PageCursor(
                field=query.order_by.field,
                value=last.get(query.order_by.field),
                item_id=str(last["_id"]),
                direction=query.order_by.direction,
            )
        return Page(items=items, next_cursor=next_cursor, fetched=len(docs))

    async def increment_views(self, item_id: str) -> None:
        result = await self._run(
            self.collection.update_one, {"_id": _object_id(item_id)}, {"$inc": {"views": 1}}
        )
        if result.matched_count == 0:
            raise ItemNotFoundError(self.collection.name, item_id)

    # ---------- admin operations ----------

    def _list_all(self) -> list:
        return list(self.collection.find({}).sort([("uploaded_at", DESCENDING), ("_id", DESCENDING)]))

    async def list_all(self) -> List[GalleryItem]:
        return self._convert(await self._run(self._list_all))

    async def get(self, item_id: str) -> GalleryItem:
        doc = await self._run(self.collection.find_one, {"_id": _object_id(item_id)})
        if not doc:
            raise ItemNotFoundError(self.collection.name, item_id)
        return document_to_item(doc)

    async def create(self, data: GalleryItemCreate) -> GalleryItem:
        doc = data.model_dump(mode="json")
        doc["uploaded_at"] = utcnow()
        doc["views"] = 0
        result = await self._run(self.collection.insert_one, doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created gallery item {result.inserted_id}")
        return document_to_item(doc)

    async def update(self, item_id: str, changes: GalleryItemUpdate) -> GalleryItem:
        fields = changes.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not fields:
            return await self.get(item_id)
        doc = await self._run(
            self.collection.find_one_and_update,
            {"_id": _object_id(item_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise ItemNotFoundError(self.collection.name, item_id)
        return document_to_item(doc)

    async def delete(self, item_id: str) -> None:
        result = await self._run(self.collection.delete_one, {"_id": _object_id(item_id)})
        if result.deleted_count == 0:
            raise ItemNotFoundError(self.collection.name, item_id)
        logger.info(f"Deleted gallery item {item_id}")

    def subscribe(self, on_snapshot: Callable[[List[GalleryItem]], object]) -> Subscription:
        """Live admin listing: the full item list now and after every change."""
        return Subscription(
            fetch=self.list_all,
            wait_for_change=change_stream_waiter(self.collection),
            on_snapshot=on_snapshot,
        )
