# shoptree/bot.py
import logging
from telegram.ext import Application, CommandHandler
from .config import Config
from .database import Database
from .handlers import CategoryOrganizerHandler, build_organizer_conversation
from .services import (
    CategoryService, DropIntentClassifier, OrderKeyAllocator, ReorderController
)

class CategoryOrganizerBot:
    def __init__(self):
        """راه‌اندازی ربات"""
        self.logger = logging.getLogger(__name__)
        self.db = Database()
        self.category_service = CategoryService(self.db)
        self.controller = ReorderController(
            self.category_service,
            Config.STORE_ID,
            allocator=OrderKeyAllocator(Config.ORDER_STEP, Config.ORDER_EPSILON),
            classifier=DropIntentClassifier(
                Config.DROP_ABOVE_THRESHOLD, Config.DROP_BELOW_THRESHOLD
            )
        )
        self.application = (
            Application.builder()
            .token(Config.TELEGRAM_TOKEN)
            .post_init(self._on_startup)
            .post_shutdown(self._on_shutdown)
            .build()
        )
        self.setup_handlers()
        
    def setup_handlers(self):
        """تنظیم هندلرهای ربات"""
        organizer = CategoryOrganizerHandler(self.controller)

        # نمایش درخت دسته‌بندی‌ها
        self.application.add_handler(CommandHandler("tree", organizer.show_tree))

        # هندلر جابه‌جایی دسته‌بندی‌ها
        self.application.add_handler(build_organizer_conversation(organizer))

    async def _on_startup(self, application: Application):
        await self.db.connect()
        await self.controller.refresh()
        self.logger.info(f"Loaded {len(self.controller.tree)} categories of store {Config.STORE_ID}")

    async def _on_shutdown(self, application: Application):
        await self.db.close()

    def run(self):
        """اجرای ربات تا زمان توقف"""
        self.application.run_polling()
