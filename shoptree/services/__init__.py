from .category_service import CategoryService
from .cycle_guard import is_descendant, would_create_cycle
from .drop_intent import DropIntentClassifier, classify_drop, offset_within_row
from .order_keys import OrderKeyAllocator
from .reorder_controller import DragState, ReorderController, ReorderResult, ReorderStatus
from .tree_builder import CategoryTree, build_tree

__all__ = [
    'CategoryService',
    'is_descendant',
    'would_create_cycle',
    'DropIntentClassifier',
    'classify_drop',
    'offset_within_row',
    'OrderKeyAllocator',
    'DragState',
    'ReorderController',
    'ReorderResult',
    'ReorderStatus',
    'CategoryTree',
    'build_tree',
]
