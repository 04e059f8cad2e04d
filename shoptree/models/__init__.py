from .base import TimeStampedModel
from .category import (
    Category,
    CategoryNode,
    CategoryStatus,
    DropIntent,
    OrderKeyPatch,
    Placement,
)

__all__ = [
    'TimeStampedModel',
    'Category',
    'CategoryNode',
    'CategoryStatus',
    'DropIntent',
    'OrderKeyPatch',
    'Placement',
]
