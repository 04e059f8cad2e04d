# shoptree/services/order_keys.py
import logging
from typing import Dict, List, Optional, Sequence
from ..models.category import Category, DropIntent, OrderKeyPatch, Placement
from .tree_builder import CategoryTree


class OrderKeyAllocator:
    """محاسبه کلید ترتیب و والد جدید برای دسته‌بندی جابه‌جا شده

    Keys are floats. Inserting between two neighbours takes their midpoint;
    inserting at either end steps away from the outermost key. When the gap
    to split is smaller than ``epsilon`` the whole sibling group is
    renumbered to ``0, step, 2*step, ...`` first and the renumbering is
    returned with the placement so it can be written as one batch.
    """

    def __init__(self, step: float = 10.0, epsilon: float = 1e-9):
        if step <= 0:
            raise ValueError("step must be positive")
        self.step = step
        self.epsilon = epsilon
        self.logger = logging.getLogger(__name__)

    def key_for_new(self, siblings: Sequence[Category]) -> float:
        """کلید دسته‌بندی جدید: بعد از تمام هم‌سطح‌ها"""
        if not siblings:
            return self.step
        return max(c.order_key for c in siblings) + self.step

    def rebalance(self, siblings: Sequence[Category]) -> List[OrderKeyPatch]:
        """شماره‌گذاری مجدد هم‌سطح‌ها با فاصله ثابت و حفظ ترتیب فعلی"""
        ordered = sorted(siblings, key=lambda c: c.order_key)
        return [
            OrderKeyPatch(category_id=c.category_id, order_key=index * self.step)
            for index, c in enumerate(ordered)
        ]

    def needs_rebalance(self, siblings: Sequence[Category]) -> bool:
        keys = sorted(c.order_key for c in siblings)
        return any(b - a < self.epsilon for a, b in zip(keys, keys[1:]))

    def allocate(self, tree: CategoryTree, moved_id: int, target_id: int,
                 intent: DropIntent) -> Placement:
        """محاسبه والد و کلید جدید بر اساس نیت رها کردن"""
        if moved_id == target_id:
            raise ValueError(f"Category {moved_id} cannot be placed relative to itself")
        target = tree.get(target_id)
        if target is None:
            raise KeyError(target_id)

        if intent == DropIntent.INSIDE:
            children = [c for c in tree.children_of(target_id) if c.category_id != moved_id]
            return Placement(parent_id=target_id, order_key=self.key_for_new(children))

        parent_id = tree.effective_parent(target_id)
        group = tree.children_of(parent_id)
        siblings = [c for c in group if c.category_id != moved_id]
        index = next(i for i, c in enumerate(siblings) if c.category_id == target_id)

        keys = [c.order_key for c in siblings]
        order_key = self._key_next_to(keys, index, intent)
        if order_key is not None:
            return Placement(parent_id=parent_id, order_key=order_key)

        # The moved category is renumbered with its group so a failed move
        # leaves the group in its previous order.
        self.logger.info(
            f"Rebalancing {len(group)} categories under parent {parent_id}"
        )
        patches = self.rebalance(group)
        rebalanced = {p.category_id: p.order_key for p in patches}
        keys = [rebalanced[c.category_id] for c in siblings]
        order_key = self._key_next_to(keys, index, intent)
        return Placement(parent_id=parent_id, order_key=order_key, rebalance=patches)

    def _key_next_to(self, keys: List[float], index: int, intent: DropIntent) -> Optional[float]:
        """Key beside ``keys[index]``, or None when the gap is too small to split"""
        target_key = keys[index]

        if intent == DropIntent.ABOVE:
            if index == 0:
                stepped = target_key - self.step
                return stepped if stepped < target_key else None
            low, high = keys[index - 1], target_key
        else:
            if index == len(keys) - 1:
                stepped = target_key + self.step
                return stepped if stepped > target_key else None
            low, high = target_key, keys[index + 1]

        if high - low < self.epsilon:
            return None
        middle = (low + high) / 2
        if not low < middle < high:
            return None
        return middle


def apply_patches(categories: Sequence[Category], patches: Sequence[OrderKeyPatch]) -> Dict[int, float]:
    """کلیدهای ترتیب پس از اعمال وصله‌ها"""
    keys = {c.category_id: c.order_key for c in categories}
    for patch in patches:
        keys[patch.category_id] = patch.order_key
    return keys
