"""
Store for the guest-submitted records the admin works through by status:
reservations and contact messages.
"""

import asyncio
import logging
from typing import Callable, Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..errors import ItemNotFoundError, StoreError
from ..live import Subscription, change_stream_waiter
from ..models.gallery_model import utcnow

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _object_id(record_id: str):
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return record_id


class RecordStore(Generic[RecordT]):
    def __init__(self, collection: Collection, model: Type[RecordT], initial_status: str):
        self.collection = collection
        self.model = model
        self.initial_status = initial_status

    async def _run(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except PyMongoError as exc:
            raise StoreError(
                f"Store call failed: {exc}",
                details={"collection": self.collection.name},
            ) from exc

    def _to_record(self, doc: dict) -> RecordT:
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return self.model.model_validate(data)

    def _find(self, status: Optional[str]) -> list:
        q = {"status": status} if status else {}
        return list(self.collection.find(q).sort([("created_at", DESCENDING), ("_id", DESCENDING)]))

    async def list(self, status: Optional[str] = None) -> List[RecordT]:
        """Newest first, optionally only those with the given status."""
        records = []
        for doc in await self._run(self._find, status):
            try:
                records.append(self._to_record(doc))
            except ValidationError as exc:
                logger.warning(f"Skipping malformed {self.collection.name} document {doc.get('_id')}: {exc}")
        return records

    async def create(self, data: BaseModel) -> RecordT:
        doc = data.model_dump(mode="json")
        doc["status"] = self.initial_status
        doc["created_at"] = utcnow()
        result = await self._run(self.collection.insert_one, doc)
        doc["_id"] = result.inserted_id
        logger.info(f"Created {self.collection.name} record {result.inserted_id}")
        return self._to_record(doc)

    async def get(self, record_id: str) -> RecordT:
        doc = await self._run(self.collection.find_one, {"_id": _object_id(record_id)})
        if not doc:
            raise ItemNotFoundError(self.collection.name, record_id)
        return self._to_record(doc)

    async def set_status(self, record_id: str, status: str) -> RecordT:
        doc = await self._run(
            self.collection.find_one_and_update,
            {"_id": _object_id(record_id)},
            {"$set": {"status": status}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise ItemNotFoundError(self.collection.name, record_id)
        logger.info(f"{self.collection.name} record {record_id} is now {status}")
        return self._to_record(doc)

    async def delete(self, record_id: str) -> None:
        result = await self._run(self.collection.delete_one, {"_id": _object_id(record_id)})
        if result.deleted_count == 0:
            raise ItemNotFoundError(self.collection.name, record_id)
        logger.info(f"Deleted {self.collection.name} record {record_id}")

    def subscribe(self, on_snapshot: Callable[[List[RecordT]], object]) -> Subscription:
        return Subscription(
            fetch=self.list,
            wait_for_change=change_stream_waiter(self.collection),
            on_snapshot=on_snapshot,
        )
