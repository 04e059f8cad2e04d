# shoptree/services/tree_builder.py
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple
from ..models.category import Category, CategoryNode


class CategoryTree:
    """درخت دسته‌بندی‌ها: نگاشت شناسه به رکورد به همراه فهرست صریح فرزندان"""

    def __init__(self, categories: Dict[int, Category], children: Dict[Optional[int], List[int]]):
        self._categories = categories
        self._children = children

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_id) -> bool:
        return category_id in self._categories

    def get(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    def categories(self) -> List[Category]:
        """رکوردهای تخت درخت به ترتیب نمایش"""
        return [category for _, category in self.walk()]

    def roots(self) -> List[Category]:
        return [self._categories[i] for i in self._children.get(None, [])]

    def children_of(self, category_id: Optional[int]) -> List[Category]:
        """فرزندان مرتب یک دسته‌بندی (None برای سطح ریشه)"""
        return [self._categories[i] for i in self._children.get(category_id, [])]

    def effective_parent(self, category_id: int) -> Optional[int]:
        """والدی که دسته‌بندی واقعاً زیر آن نمایش داده می‌شود"""
        category = self._categories[category_id]
        parent_id = category.parent_id
        if parent_id is not None and parent_id in self._categories and parent_id != category_id:
            return parent_id
        return None

    def siblings_of(self, category_id: int) -> List[Category]:
        """هم‌سطح‌های یک دسته‌بندی، خود دسته‌بندی هم شامل است"""
        return self.children_of(self.effective_parent(category_id))

    def ancestors(self, category_id: int) -> List[Category]:
        """مسیر والدها از ریشه تا والد مستقیم (breadcrumb)"""
        path = []
        seen = {category_id}
        parent_id = self.effective_parent(category_id)
        while parent_id is not None and parent_id not in seen:
            seen.add(parent_id)
            path.append(self._categories[parent_id])
            parent_id = self.effective_parent(parent_id)
        path.reverse()
        return path

    def depth(self, category_id: int) -> int:
        return len(self.ancestors(category_id))

    def subtree_ids(self, category_id: int) -> Set[int]:
        """شناسه دسته‌بندی و تمام نوادگان آن"""
        result = set()
        stack = [category_id]
        while stack:
            current = stack.pop()
            if current in result:
                continue
            result.add(current)
            stack.extend(self._children.get(current, []))
        return result

    def find_by_slug_path(self, slugs: Sequence[str]) -> Optional[Category]:
        """یافتن دسته‌بندی از روی مسیر آدرس فروشگاه، مثل parent/child"""
        if not slugs:
            return None

        if len(slugs) == 1:
            for category in self.categories():
                if category.slug == slugs[0]:
                    return category
            return None

        candidates = self.roots()
        found = None
        for slug in slugs:
            found = next((c for c in candidates if c.slug == slug), None)
            if found is None:
                return None
            candidates = self.children_of(found.category_id)
        return found

    def walk(self) -> Iterator[Tuple[int, Category]]:
        """پیمایش عمق‌اول به ترتیب نمایش، همراه با عمق هر گره"""
        stack = [(0, i) for i in reversed(self._children.get(None, []))]
        while stack:
            depth, category_id = stack.pop()
            yield depth, self._categories[category_id]
            for child_id in reversed(self._children.get(category_id, [])):
                stack.append((depth + 1, child_id))

    def as_nested(self) -> List[CategoryNode]:
        """ساخت نمای تودرتو برای نمایش"""
        def to_node(category_id: int) -> CategoryNode:
            return CategoryNode(
                category=self._categories[category_id],
                children=[to_node(i) for i in self._children.get(category_id, [])]
            )

        return [to_node(i) for i in self._children.get(None, [])]


def build_tree(categories: Iterable[Category]) -> CategoryTree:
    """ساخت درخت از فهرست تخت دسته‌بندی‌ها

    Siblings end up ordered by ``order_key`` because the input is sorted once
    (stable) before assembly. A ``parent_id`` that does not resolve to a
    category in the snapshot places the record at root level.
    """
    ordered = sorted(categories, key=lambda c: c.order_key)
    by_id = {category.category_id: category for category in ordered}
    children: Dict[Optional[int], List[int]] = {None: []}

    for category in ordered:
        parent_id = category.parent_id
        if parent_id is None or parent_id not in by_id or parent_id == category.category_id:
            parent_id = None
        children.setdefault(parent_id, []).append(category.category_id)

    return CategoryTree(by_id, children)
