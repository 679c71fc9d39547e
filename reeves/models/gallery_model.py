from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaCategory(str, Enum):
    """Categories a stored item may carry. The "all" wildcard is not one of them."""

    FOOD = "food"
    INTERIOR = "interior"
    EVENTS = "events"
    BEHIND_SCENES = "behind_scenes"
    STAFF = "staff"


ALL_CATEGORIES = "all"

# Filter-side category: a real category or the "all" wildcard
CategoryFilter = Union[MediaCategory, Literal["all"]]

SortField = Literal["recent", "views", "type"]
SortDirection = Literal["asc", "desc"]

CATEGORY_LABELS = {
    ALL_CATEGORIES: "All",
    MediaCategory.FOOD.value: "Food",
    MediaCategory.INTERIOR.value: "Interior",
    MediaCategory.EVENTS.value: "Events",
    MediaCategory.BEHIND_SCENES.value: "Behind the Scenes",
    MediaCategory.STAFF.value: "Staff",
}
DEFAULT_CATEGORY_LABEL = "Uncategorized"


def category_label(category) -> str:
    """Display label for a category; unknown or missing values get a default."""
    if isinstance(category, Enum):
        category = category.value
    return CATEGORY_LABELS.get(category, DEFAULT_CATEGORY_LABEL)


def normalize_tags(tags) -> List[str]:
    """Lowercase, strip and drop empty tags while keeping display order."""
    if isinstance(tags, str):
        tags = tags.split(",")
    cleaned = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class GalleryItem(BaseModel):
    id: str
    url: str
    type: MediaType = MediaType.IMAGE
    # None for a stored value outside the taxonomy; displayed as "Uncategorized"
    category: Optional[MediaCategory] = None
    tags: List[str] = []
    title: Optional[str] = None
    description: Optional[str] = None
    uploaded_at: datetime
    featured: bool = False
    views: int = Field(default=0, ge=0)

    @property
    def is_video(self) -> bool:
        return self.type == MediaType.VIDEO

    @property
    def category_label(self) -> str:
        return category_label(self.category)


class GalleryItemCreate(BaseModel):
    url: str
    type: MediaType = MediaType.IMAGE
    category: MediaCategory
    tags: List[str] = []
    title: Optional[str] = None
    description: Optional[str] = None
    featured: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        return normalize_tags(value)


class GalleryItemUpdate(BaseModel):
    """Editable fields. uploaded_at and views are not editable."""

    type: Optional[MediaType] = None
    category: Optional[MediaCategory] = None
    tags: Optional[List[str]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    featured: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        if value is None:
            return None
        return normalize_tags(value)


class GalleryFilter(BaseModel):
    """Current query intent. Frozen: a change is always a new filter."""

    model_config = ConfigDict(frozen=True)

    category: CategoryFilter = ALL_CATEGORIES
    search_query: str = ""
    sort_by: SortField = "recent"
    sort_direction: SortDirection = "desc"


class GalleryPageOut(BaseModel):
    items: List[GalleryItem]
    next_cursor: Optional[str] = None
    has_more: bool = False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
