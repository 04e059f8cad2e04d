# shoptree/database/database.py
import asyncpg
import logging
from pathlib import Path
from typing import Optional
from ..config import Config

class Database:
    """کلاس مدیریت ارتباط با دیتابیس"""
    
    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        """برقراری ارتباط با دیتابیس"""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=Config.DB_POOL_MIN,
                max_size=Config.DB_POOL_MAX
            )
            
            # اجرای migrations
            await self._run_migrations()
            
            self.logger.info("اتصال به دیتابیس برقرار شد")
        except Exception as e:
            self.logger.error(f"خطا در اتصال به دیتابیس: {e}")
            raise

    async def close(self):
        """قطع ارتباط با دیتابیس"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("اتصال به دیتابیس قطع شد")

    async def _run_migrations(self):
        """اجرای migrations"""
        migrations_path = Path(__file__).parent / "migrations"
        
        async with self.pool.acquire() as conn:
            # ایجاد جدول migrations
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS migrations (
                    id SERIAL PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                )
            """)
            
            for migration_file in sorted(migrations_path.glob("*.sql")):
                migration_name = migration_file.name
                
                is_applied = await conn.fetchval(
                    "SELECT COUNT(*) FROM migrations WHERE name = $1",
                    migration_name
                )
                if is_applied:
                    continue

                async with conn.transaction():
                    await conn.execute(migration_file.read_text())
                    await conn.execute(
                        "INSERT INTO migrations (name) VALUES ($1)",
                        migration_name
                    )
                
                self.logger.info(f"Migration {migration_name} اجرا شد")
