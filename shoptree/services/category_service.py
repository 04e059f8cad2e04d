# shoptree/services/category_service.py
import logging
from typing import List, Dict, Optional, Any, Sequence
import asyncpg
from ..exceptions import PersistError, RecordMissing
from ..models.category import Category, OrderKeyPatch

_UNSET = object()

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class CategoryService:
    """سرویس مدیریت دسته‌بندی‌ها؛ انبار دسته‌بندی برای کنترلر جابه‌جایی"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def load_snapshot(self, store_id: int) -> List[Category]:
        """دریافت تمام دسته‌بندی‌های یک فروشگاه"""
        try:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT *
                    FROM categories
                    WHERE store_id = $1
                    ORDER BY order_key
                """, store_id)
        except _DB_ERRORS as e:
            raise PersistError(f"Could not load categories of store {store_id}: {e}") from e
        return [Category.model_validate(dict(row)) for row in rows]

    async def patch_category(self, category_id: int, *, parent_id: Any = _UNSET,
                             order_key: Any = _UNSET) -> None:
        """بروزرسانی فیلدهای ترتیب یک دسته‌بندی"""
        update_data: Dict[str, Any] = {}
        if parent_id is not _UNSET:
            update_data['parent_id'] = parent_id
        if order_key is not _UNSET:
            update_data['order_key'] = float(order_key)
        if not update_data:
            return

        query_parts = []
        params = []
        param_count = 1

        for key, value in update_data.items():
            query_parts.append(f"{key} = ${param_count}")
            params.append(value)
            param_count += 1

        params.append(category_id)
        query = f"""
            UPDATE categories
            SET {', '.join(query_parts)}, updated_at = CURRENT_TIMESTAMP
            WHERE category_id = ${param_count}
        """

        try:
            async with self.db.pool.acquire() as conn:
                result = await conn.execute(query, *params)
        except asyncpg.ForeignKeyViolationError as e:
            raise RecordMissing([parent_id]) from e
        except _DB_ERRORS as e:
            raise PersistError(f"Could not update category {category_id}: {e}") from e

        if result != "UPDATE 1":
            raise RecordMissing([category_id])

    async def batch_patch(self, patches: Sequence[OrderKeyPatch]) -> None:
        """بروزرسانی گروهی کلیدهای ترتیب؛ همه یا هیچ"""
        if not patches:
            return

        try:
            async with self.db.pool.acquire() as conn:
                async with conn.transaction():
                    missing = []
                    for patch in patches:
                        result = await conn.execute("""
                            UPDATE categories
                            SET order_key = $1, updated_at = CURRENT_TIMESTAMP
                            WHERE category_id = $2
                        """, float(patch.order_key), patch.category_id)
                        if result != "UPDATE 1":
                            missing.append(patch.category_id)

                    # خطا در تراکنش باعث بازگشت تمام تغییرات می‌شود
                    if missing:
                        raise RecordMissing(missing)
        except _DB_ERRORS as e:
            raise PersistError(f"Could not rebalance {len(patches)} categories: {e}") from e

        self.logger.info(f"Order keys of {len(patches)} categories rewritten")

    async def add_category(self, category_data: Dict[str, Any]) -> int:
        """افزودن دسته‌بندی جدید"""
        try:
            async with self.db.pool.acquire() as conn:
                category_id = await conn.fetchval("""
                    INSERT INTO categories
                        (store_id, name, slug, description, image_url, parent_id, order_key, status)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    RETURNING category_id
                """,
                    category_data['store_id'],
                    category_data['name'],
                    category_data.get('slug'),
                    category_data.get('description'),
                    category_data.get('image_url'),
                    category_data.get('parent_id'),
                    float(category_data.get('order_key', 0)),
                    category_data.get('status', 'active')
                )
        except asyncpg.ForeignKeyViolationError as e:
            raise RecordMissing([category_data.get('parent_id')]) from e
        except _DB_ERRORS as e:
            raise PersistError(f"Could not create category: {e}") from e
        return category_id

    async def get_category(self, category_id: int) -> Optional[Dict[str, Any]]:
        """دریافت اطلاعات دسته‌بندی"""
        async with self.db.pool.acquire() as conn:
            category = await conn.fetchrow("""
                SELECT c.*, p.name as parent_name
                FROM categories c
                LEFT JOIN categories p ON p.category_id = c.parent_id
                WHERE c.category_id = $1
            """, category_id)
            return dict(category) if category else None

    async def delete_category(self, category_id: int) -> bool:
        """حذف دسته‌بندی؛ زیردسته‌ها به سطح ریشه منتقل می‌شوند"""
        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM categories
                WHERE category_id = $1
            """, category_id)
            return result == "DELETE 1"
