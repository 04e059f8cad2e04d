# shoptree/services/reorder_controller.py
import logging
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from ..exceptions import (
    CycleRejected, PersistError, PersistFailed, RecordMissing, StaleSnapshot
)
from ..models.category import Category, DropIntent, Placement
from .cycle_guard import is_descendant
from .drop_intent import DropIntentClassifier
from .order_keys import OrderKeyAllocator, apply_patches
from .tree_builder import CategoryTree, build_tree


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    COMMITTING = "committing"


class ReorderStatus(str, Enum):
    COMMITTED = "committed"
    NO_OP = "no_op"
    IGNORED = "ignored"


class ReorderResult(BaseModel):
    """نتیجه یک عملیات جابه‌جایی"""
    status: ReorderStatus
    moved_id: Optional[int] = None
    placement: Optional[Placement] = None
    tree: Optional[CategoryTree] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


class ReorderController:
    """هماهنگ‌کننده جابه‌جایی دسته‌بندی‌ها در درخت یک فروشگاه

    ``store`` is any object offering the category store contract:
    ``load_snapshot(store_id)``, ``patch_category(category_id, parent_id=,
    order_key=)``, ``batch_patch(patches)`` and ``add_category(data)``.
    Only one move is applied at a time; a drop that arrives while another
    is being committed is ignored.
    """

    def __init__(self, store, store_id: int,
                 allocator: Optional[OrderKeyAllocator] = None,
                 classifier: Optional[DropIntentClassifier] = None):
        self.store = store
        self.store_id = store_id
        self.allocator = allocator or OrderKeyAllocator()
        self.classifier = classifier or DropIntentClassifier()
        self.logger = logging.getLogger(__name__)

        self.snapshot: List[Category] = []
        self.tree: CategoryTree = build_tree([])
        self.state = DragState.IDLE
        self._moved_id: Optional[int] = None
        self._target_id: Optional[int] = None
        self._intent: Optional[DropIntent] = None

    async def refresh(self) -> CategoryTree:
        """دریافت تصویر کامل از انبار و ساخت مجدد درخت"""
        snapshot = await self.store.load_snapshot(self.store_id)
        self.snapshot = list(snapshot)
        self.tree = build_tree(self.snapshot)
        return self.tree

    # Gesture API

    def begin_drag(self, moved_id: int) -> bool:
        """شروع کشیدن یک دسته‌بندی"""
        if self.state == DragState.COMMITTING or moved_id not in self.tree:
            return False
        self.state = DragState.DRAGGING
        self._moved_id = moved_id
        self._target_id = None
        self._intent = None
        return True

    def hover(self, target_id: int, offset: float) -> Optional[DropIntent]:
        """ثبت ردیف هدف و نیت فعلی؛ خارج از حالت کشیدن None برمی‌گرداند"""
        if self.state not in (DragState.DRAGGING, DragState.HOVERING):
            return None
        intent = self.classifier.classify(offset)
        self.state = DragState.HOVERING
        self._target_id = target_id
        self._intent = intent
        return intent

    @property
    def hover_allowed(self) -> bool:
        """آیا رها کردن روی هدف فعلی مجاز است"""
        if self.state != DragState.HOVERING or self._target_id not in self.tree:
            return False
        if self._moved_id == self._target_id:
            return False
        return not is_descendant(self.snapshot, self._moved_id, self._target_id)

    def cancel_drag(self):
        """لغو کشیدن بدون هیچ نوشتنی در انبار"""
        if self.state != DragState.COMMITTING:
            self._reset()

    async def drop(self) -> ReorderResult:
        """رها کردن دسته‌بندی روی آخرین هدف ثبت شده"""
        if self.state == DragState.COMMITTING:
            self.logger.debug("Drop ignored, another move is being committed")
            return ReorderResult(status=ReorderStatus.IGNORED)
        if self.state != DragState.HOVERING:
            moved_id = self._moved_id
            self._reset()
            return ReorderResult(status=ReorderStatus.NO_OP, moved_id=moved_id, tree=self.tree)
        return await self.move(self._moved_id, self._target_id, self._intent)

    async def move(self, moved_id: int, target_id: int, intent: DropIntent) -> ReorderResult:
        """جابه‌جایی دسته‌بندی نسبت به دسته‌بندی هدف"""
        if self.state == DragState.COMMITTING:
            self.logger.debug(f"Move of category {moved_id} ignored, another move is being committed")
            return ReorderResult(status=ReorderStatus.IGNORED, moved_id=moved_id)

        self.state = DragState.COMMITTING
        try:
            return await self._commit(moved_id, target_id, DropIntent(intent))
        finally:
            self._reset()

    async def create_category(self, data: Dict[str, Any]) -> int:
        """افزودن دسته‌بندی جدید بعد از تمام هم‌سطح‌هایش"""
        parent_id = data.get('parent_id')
        if parent_id not in self.tree:
            parent_id = None
        siblings = self.tree.children_of(parent_id)

        category_data = dict(data)
        category_data['store_id'] = self.store_id
        category_data['parent_id'] = parent_id
        category_data['order_key'] = self.allocator.key_for_new(siblings)

        category_id = await self.store.add_category(category_data)
        self.logger.info(f"Category {category_id} created under parent {parent_id}")
        await self.refresh()
        return category_id

    # Internals

    async def _commit(self, moved_id: int, target_id: int, intent: DropIntent) -> ReorderResult:
        if moved_id == target_id:
            self.logger.debug(f"Category {moved_id} dropped onto itself")
            return ReorderResult(status=ReorderStatus.NO_OP, moved_id=moved_id, tree=self.tree)

        missing = [i for i in (moved_id, target_id) if i not in self.tree]
        if missing:
            await self._refresh_after_stale()
            raise StaleSnapshot(missing)

        if is_descendant(self.snapshot, moved_id, target_id):
            self.logger.warning(
                f"Rejected move of category {moved_id} into its own subtree (target {target_id})"
            )
            raise CycleRejected(moved_id, target_id)

        placement = self.allocator.allocate(self.tree, moved_id, target_id, intent)
        if self._is_current_position(moved_id, placement):
            self.logger.debug(f"Category {moved_id} is already at the requested position")
            return ReorderResult(status=ReorderStatus.NO_OP, moved_id=moved_id, tree=self.tree)

        try:
            if placement.rebalance:
                await self.store.batch_patch(placement.rebalance)
            await self.store.patch_category(
                moved_id,
                parent_id=placement.parent_id,
                order_key=placement.order_key
            )
        except RecordMissing as e:
            self.logger.warning(f"Stale snapshot while moving category {moved_id}: {e}")
            await self._refresh_after_stale()
            raise StaleSnapshot(e.category_ids) from e
        except PersistError as e:
            self.logger.error(f"Failed to persist move of category {moved_id}: {e}")
            raise PersistFailed(moved_id, e) from e

        self.logger.info(
            f"Category {moved_id} moved {intent.value} {target_id}: "
            f"parent={placement.parent_id} order_key={placement.order_key}"
        )
        await self.refresh()
        return ReorderResult(
            status=ReorderStatus.COMMITTED,
            moved_id=moved_id,
            placement=placement,
            tree=self.tree
        )

    def _is_current_position(self, moved_id: int, placement: Placement) -> bool:
        """آیا مکان محاسبه شده همان مکان فعلی دسته‌بندی است"""
        current_parent = self.tree.effective_parent(moved_id)
        if placement.parent_id != current_parent:
            return False

        group = self.tree.children_of(current_parent)
        current_index = next(i for i, c in enumerate(group) if c.category_id == moved_id)
        keys = apply_patches(group, placement.rebalance)
        new_index = sum(
            1 for c in group
            if c.category_id != moved_id and keys[c.category_id] < placement.order_key
        )
        return new_index == current_index

    async def _refresh_after_stale(self):
        try:
            await self.refresh()
        except PersistError as e:
            self.logger.error(f"Could not reload categories of store {self.store_id}: {e}")

    def _reset(self):
        self.state = DragState.IDLE
        self._moved_id = None
        self._target_id = None
        self._intent = None
