# shoptree/services/cycle_guard.py
from typing import Dict, Iterable, List, Optional, Set
from ..models.category import Category


def _children_index(categories: Iterable[Category]) -> Dict[int, List[int]]:
    index: Dict[int, List[int]] = {}
    for category in categories:
        if category.parent_id is not None and category.parent_id != category.category_id:
            index.setdefault(category.parent_id, []).append(category.category_id)
    return index


def is_descendant(categories: Iterable[Category], ancestor_id: int, node_id: int) -> bool:
    """بررسی اینکه node_id خود ancestor_id یا یکی از نوادگان آن است"""
    if node_id == ancestor_id:
        return True

    index = _children_index(categories)
    visited: Set[int] = set()

    def descend(current_id: int) -> bool:
        if current_id in visited:
            return False
        visited.add(current_id)
        for child_id in index.get(current_id, []):
            if child_id == node_id or descend(child_id):
                return True
        return False

    return descend(ancestor_id)


def would_create_cycle(categories: Iterable[Category], moved_id: int,
                       new_parent_id: Optional[int]) -> bool:
    """بررسی وابستگی حلقوی در صورت انتقال دسته‌بندی زیر والد جدید"""
    if new_parent_id is None:
        return False
    return is_descendant(categories, moved_id, new_parent_id)
