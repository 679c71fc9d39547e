from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MenuCategory(str, Enum):
    APPETIZERS = "appetizers"
    MAINS = "mains"
    DESSERTS = "desserts"
    BEVERAGES = "beverages"


class MenuItemIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    category: MenuCategory
    image: Optional[str] = None


class MenuItem(MenuItemIn):
    id: str


class MenuListOut(BaseModel):
    categories: List[str]
    items: List[MenuItem]
