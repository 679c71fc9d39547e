import asyncio
import logging
from typing import Callable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..errors import ItemNotFoundError, StoreError
from ..live import Subscription, change_stream_waiter
from ..models.menu_model import MenuItem, MenuItemIn

logger = logging.getLogger(__name__)


def _object_id(item_id: str):
    try:
        return ObjectId(item_id)
    except (InvalidId, TypeError):
        return item_id


def document_to_menu_item(doc: dict) -> MenuItem:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return MenuItem.model_validate(data)


class MenuStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    async def _run(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except PyMongoError as exc:
            raise StoreError(
                f"Menu store call failed: {exc}",
                details={"collection": self.collection.name},
            ) from exc

    def _find(self, category: Optional[str]) -> list:
        q = {"category": category} if category else {}
        return list(self.collection.find(q).sort([("category", ASCENDING), ("name", ASCENDING)]))

    async def list_items(self, category: Optional[str] = None) -> List[MenuItem]:
        items = []
        for doc in await self._run(self._find, category):
            try:
                items.append(document_to_menu_item(doc))
            except ValidationError as exc:
                logger.warning(f"Skipping malformed menu document {doc.get('_id')}: {exc}")
        return items

    async def categories(self) -> List[str]:
        found = await self._run(self.collection.distinct, "category")
        return sorted(c for c in found if c)

    async def create(self, data: MenuItemIn) -> MenuItem:
        doc = data.model_dump(mode="json")
        result = await self._run(self.collection.insert_one, doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created menu item {result.inserted_id}")
        return document_to_menu_item(doc)

    async def update(self, item_id: str, data: MenuItemIn) -> MenuItem:
        doc = await self._run(
            self.collection.find_one_and_update,
            {"_id": _object_id(item_id)},
            {"$set": data.model_dump(mode="json")},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise ItemNotFoundError(self.collection.name, item_id)
        return document_to_menu_item(doc)

    async def delete(self, item_id: str) -> None:
        result = await self._run(self.collection.delete_one, {"_id": _object_id(item_id)})
        if result.deleted_count == 0:
            raise ItemNotFoundError(self.collection.name, item_id)
        logger.info(f"Deleted menu item {item_id}")

    def subscribe(self, on_snapshot: Callable[[List[MenuItem]], object]) -> Subscription:
        return Subscription(
            fetch=self.list_items,
            wait_for_change=change_stream_waiter(self.collection),
            on_snapshot=on_snapshot,
        )
