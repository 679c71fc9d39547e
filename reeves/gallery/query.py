"""
Gallery query building.

A GalleryFilter plus an optional PageCursor becomes a StoreQuery: the
constraint set any GalleryStore knows how to execute. Nothing in here
touches the network.
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from bson import json_util

from ..errors import InvalidCursorError
from ..models.gallery_model import ALL_CATEGORIES, GalleryFilter, GalleryItem

GALLERY_COLLECTION = "gallery"

OP_EQUALS = "=="
OP_ARRAY_CONTAINS = "array-contains"

SORT_FIELDS = {
    "recent": "uploaded_at",
    "views": "views",
    "type": "type",
}

SORT_DIRECTIONS = ("asc", "desc")

_CURSOR_JSON_OPTIONS = json_util.JSONOptions(tz_aware=True)


@dataclass(frozen=True)
class PageCursor:
    """Position of the last item of a page in a given sort order."""

    field: str
    value: Any
    item_id: str
    direction: str = "desc"

    def encode(self) -> str:
        raw = json_util.dumps({"f": self.field, "d": self.direction, "v": self.value, "id": self.item_id})
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "PageCursor":
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8")
            data = json_util.loads(raw, json_options=_CURSOR_JSON_OPTIONS)
            if data["d"] not in SORT_DIRECTIONS:
                raise ValueError(f"bad direction {data['d']!r}")
            return cls(field=data["f"], value=data["v"], item_id=str(data["id"]), direction=data["d"])
        except (ValueError, TypeError, KeyError, binascii.Error, UnicodeError):
            raise InvalidCursorError(token)

    @classmethod
    def after(cls, item: GalleryItem, sort_field: str, direction: str = "desc") -> "PageCursor":
        value = getattr(item, sort_field)
        if isinstance(value, Enum):
            value = value.value
        return cls(field=sort_field, value=value, item_id=item.id, direction=direction)

    def matches(self, gallery_filter: GalleryFilter) -> bool:
        """Whether this cursor continues a listing in the filter's sort order."""
        return self.field == sort_field_for(gallery_filter) and self.direction == gallery_filter.sort_direction


@dataclass(frozen=True)
class FieldFilter:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "desc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


@dataclass(frozen=True)
class StoreQuery:
    order_by: OrderBy
    limit: int
    filters: Tuple[FieldFilter, ...] = ()
    start_after: Optional[PageCursor] = None
    collection: str = GALLERY_COLLECTION


def sort_field_for(gallery_filter: GalleryFilter) -> str:
    return SORT_FIELDS[gallery_filter.sort_by]


def build_query(
    gallery_filter: GalleryFilter,
    cursor: Optional[PageCursor],
    page_size: int,
) -> StoreQuery:
    """Translate the filter and pagination position into a store query."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    filters = []
    if gallery_filter.category != ALL_CATEGORIES:
        filters.append(FieldFilter("category", OP_EQUALS, gallery_filter.category.value))

    # single-term exact tag match
    search = gallery_filter.search_query.strip().lower()
    if search:
        filters.append(FieldFilter("tags", OP_ARRAY_CONTAINS, search))

    return StoreQuery(
        order_by=OrderBy(sort_field_for(gallery_filter), gallery_filter.sort_direction),
        limit=page_size,
        filters=tuple(filters),
        start_after=cursor,
    )
