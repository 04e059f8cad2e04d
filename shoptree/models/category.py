# shoptree/models/category.py
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel
from .base import TimeStampedModel

class CategoryStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"

class DropIntent(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    INSIDE = "inside"

class Category(TimeStampedModel):
    """Category model for product categorization"""
    category_id: int
    store_id: int = 1
    name: str
    slug: Optional[str] = None
    parent_id: Optional[int] = None
    order_key: float = 0.0
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: CategoryStatus = CategoryStatus.ACTIVE

class OrderKeyPatch(BaseModel):
    """New ordering key for one category, used by rebalancing"""
    category_id: int
    order_key: float

class Placement(BaseModel):
    """Destination of a moved category"""
    parent_id: Optional[int] = None
    order_key: float
    rebalance: List[OrderKeyPatch] = []

class CategoryNode(BaseModel):
    """Nested view of a category, not stored in DB"""
    category: Category
    children: List['CategoryNode'] = []

    @property
    def category_id(self) -> int:
        return self.category.category_id
