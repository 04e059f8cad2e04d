from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from shoptree.exceptions import PersistError, RecordMissing
from shoptree.models import Category
from shoptree.services import ReorderController
from shoptree.services.category_service import _UNSET


def make_category(category_id: int, order_key: float, parent_id: Optional[int] = None,
                  **fields) -> Category:
    fields.setdefault("name", f"Category {category_id}")
    fields.setdefault("slug", f"category-{category_id}")
    return Category(
        category_id=category_id,
        parent_id=parent_id,
        order_key=order_key,
        **fields,
    )


class InMemoryCategoryStore:
    """Store fake with the same contract as CategoryService."""

    def __init__(self, categories: List[Category] = ()):
        self.rows: Dict[int, Category] = {c.category_id: c for c in categories}
        self.fail_writes = False
        self.fail_patch = False
        self.fail_batch = False
        self.write_gate: Optional[asyncio.Event] = None
        self.patch_calls = []
        self.batch_calls = []
        self.load_calls = 0

    async def load_snapshot(self, store_id: int) -> List[Category]:
        self.load_calls += 1
        return [c.model_copy() for c in self.rows.values() if c.store_id == store_id]

    async def patch_category(self, category_id, *, parent_id=_UNSET, order_key=_UNSET):
        self.patch_calls.append((category_id, parent_id, order_key))
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_writes or self.fail_patch:
            raise PersistError("connection reset")
        if category_id not in self.rows:
            raise RecordMissing([category_id])
        if parent_id is not _UNSET and parent_id is not None and parent_id not in self.rows:
            raise RecordMissing([parent_id])

        update = {}
        if parent_id is not _UNSET:
            update["parent_id"] = parent_id
        if order_key is not _UNSET:
            update["order_key"] = order_key
        self.rows[category_id] = self.rows[category_id].model_copy(update=update)

    async def batch_patch(self, patches):
        self.batch_calls.append(list(patches))
        if self.fail_writes or self.fail_batch:
            raise PersistError("connection reset")
        missing = [p.category_id for p in patches if p.category_id not in self.rows]
        if missing:
            raise RecordMissing(missing)
        for p in patches:
            self.rows[p.category_id] = self.rows[p.category_id].model_copy(
                update={"order_key": p.order_key}
            )

    async def add_category(self, data) -> int:
        if self.fail_writes:
            raise PersistError("connection reset")
        category_id = max(self.rows, default=0) + 1
        self.rows[category_id] = Category(category_id=category_id, **data)
        return category_id

    def keys(self, parent_id=None) -> List[int]:
        """Ids under ``parent_id`` in order_key order."""
        group = [c for c in self.rows.values() if c.parent_id == parent_id]
        return [c.category_id for c in sorted(group, key=lambda c: c.order_key)]


@pytest.fixture()
def flat_siblings():
    # 1, 2, 3 at root with keys 10, 20, 30; 4 nested under 3
    return [
        make_category(1, 10),
        make_category(2, 20),
        make_category(3, 30),
        make_category(4, 10, parent_id=3),
    ]


@pytest.fixture()
def nested_categories():
    #  1 Electronics
    #      2 Phones
    #          4 Cases
    #      3 Laptops
    #  5 Books
    return [
        make_category(1, 10, name="Electronics", slug="electronics"),
        make_category(2, 10, parent_id=1, name="Phones", slug="phones"),
        make_category(3, 20, parent_id=1, name="Laptops", slug="laptops"),
        make_category(4, 10, parent_id=2, name="Cases", slug="cases"),
        make_category(5, 20, name="Books", slug="books"),
    ]


@pytest.fixture()
def store(flat_siblings):
    return InMemoryCategoryStore(flat_siblings)


@pytest.fixture()
def controller(store):
    return ReorderController(store, store_id=1)
