# shoptree/handlers/category_organizer.py
import logging
from telegram import Update
from telegram.ext import (
    ContextTypes, ConversationHandler, CommandHandler, CallbackQueryHandler, TypeHandler
)
from .base_handler import BaseHandler
from ..config import Config
from ..constants import (
    WAITING_MOVED_CATEGORY, WAITING_TARGET_CATEGORY, WAITING_DROP_POSITION,
    ORGANIZE_CATEGORIES, PICK_PREFIX, TARGET_PREFIX, DROP_PREFIX, CANCEL_ORGANIZE
)
from ..exceptions import CycleRejected, PersistFailed, StaleSnapshot
from ..models.category import DropIntent
from ..services.reorder_controller import ReorderStatus
from ..utils.formatters import format_tree, format_breadcrumb

logger = logging.getLogger(__name__)


class CategoryOrganizerHandler(BaseHandler):
    """هندلر مرتب‌سازی و جابه‌جایی دسته‌بندی‌ها"""

    async def show_tree(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """نمایش درخت دسته‌بندی‌ها"""
        if not await self.is_admin(update.effective_user.id):
            await update.message.reply_text("⛔️ شما به این بخش دسترسی ندارید.")
            return

        tree = await self.controller.refresh()
        await update.message.reply_text(f"🗂 دسته‌بندی‌ها:\n\n{format_tree(tree)}")

    async def start_organize(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """شروع فرآیند جابه‌جایی: انتخاب دسته‌بندی"""
        query = update.callback_query
        if query:
            await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await self._reply(update, "⛔️ شما به این بخش دسترسی ندارید.")
            return ConversationHandler.END

        # رها کردن کشیدنی که از مکالمه قبلی باقی مانده است
        self.controller.cancel_drag()

        tree = await self.controller.refresh()
        if not len(tree):
            await self._reply(update, "🗂 هنوز دسته‌بندی‌ای ثبت نشده است.")
            return ConversationHandler.END

        await self._reply(
            update,
            "🔀 کدام دسته‌بندی را می‌خواهید جابه‌جا کنید؟",
            reply_markup=self.keyboards.category_picker(tree)
        )
        return WAITING_MOVED_CATEGORY

    async def handle_moved_selection(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """دریافت دسته‌بندی جابه‌جا شونده"""
        query = update.callback_query
        await query.answer()

        moved_id = int(query.data[len(PICK_PREFIX):])
        if not self.controller.begin_drag(moved_id):
            await query.edit_message_text("❌ دسته‌بندی مورد نظر یافت نشد یا جابه‌جایی دیگری در جریان است.")
            return ConversationHandler.END

        context.user_data['organize_moved_id'] = moved_id
        tree = self.controller.tree
        await query.edit_message_text(
            f"📁 {format_breadcrumb(tree, moved_id)}\n\n"
            "دسته‌بندی هدف را انتخاب کنید:",
            reply_markup=self.keyboards.target_picker(tree, moved_id)
        )
        return WAITING_TARGET_CATEGORY

    async def handle_target_selection(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """دریافت دسته‌بندی هدف"""
        query = update.callback_query
        await query.answer()

        target_id = int(query.data[len(TARGET_PREFIX):])
        context.user_data['organize_target_id'] = target_id
        tree = self.controller.tree

        await query.edit_message_text(
            f"🎯 {format_breadcrumb(tree, target_id)}\n\n"
            "دسته‌بندی کجا قرار بگیرد؟",
            reply_markup=self.keyboards.drop_position()
        )
        return WAITING_DROP_POSITION

    async def handle_drop_position(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """اعمال جابه‌جایی"""
        query = update.callback_query
        await query.answer()

        intent = DropIntent(query.data[len(DROP_PREFIX):])
        moved_id = context.user_data.pop('organize_moved_id', None)
        target_id = context.user_data.pop('organize_target_id', None)
        if moved_id is None or target_id is None:
            self.controller.cancel_drag()
            await query.edit_message_text("❌ اطلاعات جابه‌جایی ناقص است. لطفاً مجدداً تلاش کنید.")
            return ConversationHandler.END

        try:
            result = await self.controller.move(moved_id, target_id, intent)
        except CycleRejected:
            await query.edit_message_text("⛔️ یک دسته‌بندی را نمی‌توان به زیرمجموعه خودش منتقل کرد.")
            return ConversationHandler.END
        except PersistFailed as e:
            logger.error(f"Reorder failed: {e}")
            await query.edit_message_text("❌ ذخیره تغییرات انجام نشد. لطفاً مجدداً تلاش کنید.")
            return ConversationHandler.END
        except StaleSnapshot:
            await query.edit_message_text(
                "⚠️ فهرست دسته‌بندی‌ها تغییر کرده بود و بروزرسانی شد. لطفاً جابه‌جایی را دوباره انجام دهید."
            )
            return ConversationHandler.END

        if result.status == ReorderStatus.COMMITTED:
            message = f"✅ جابه‌جایی انجام شد.\n\n{format_tree(result.tree, marked_id=moved_id)}"
        elif result.status == ReorderStatus.NO_OP:
            message = "ℹ️ دسته‌بندی از قبل در همین محل قرار داشت."
        else:
            message = "⏳ جابه‌جایی دیگری در حال انجام است. لطفاً کمی بعد تلاش کنید."

        await query.edit_message_text(message)
        return ConversationHandler.END

    async def cancel_organize(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """لغو جابه‌جایی"""
        self.controller.cancel_drag()
        context.user_data.pop('organize_moved_id', None)
        context.user_data.pop('organize_target_id', None)
        return await self.cancel_conversation(update, context)

    async def handle_timeout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """پایان مکالمه پس از بی‌فعالیتی"""
        self.controller.cancel_drag()
        context.user_data.pop('organize_moved_id', None)
        context.user_data.pop('organize_target_id', None)
        return ConversationHandler.END

    async def _reply(self, update: Update, text: str, reply_markup=None):
        if update.callback_query:
            await update.callback_query.edit_message_text(text, reply_markup=reply_markup)
        else:
            await update.message.reply_text(text, reply_markup=reply_markup)


def build_organizer_conversation(handler: CategoryOrganizerHandler) -> ConversationHandler:
    """تعریف هندلر مکالمه برای جابه‌جایی دسته‌بندی‌ها"""
    return ConversationHandler(
        entry_points=[
            CommandHandler("organize", handler.start_organize),
            CallbackQueryHandler(
                handler.start_organize,
                pattern=f'^{ORGANIZE_CATEGORIES}$'
            )
        ],
        states={
            WAITING_MOVED_CATEGORY: [
                CallbackQueryHandler(
                    handler.handle_moved_selection,
                    pattern=f'^{PICK_PREFIX}\\d+$'
                )
            ],
            WAITING_TARGET_CATEGORY: [
                CallbackQueryHandler(
                    handler.handle_target_selection,
                    pattern=f'^{TARGET_PREFIX}\\d+$'
                )
            ],
            WAITING_DROP_POSITION: [
                CallbackQueryHandler(
                    handler.handle_drop_position,
                    pattern=f'^{DROP_PREFIX}(above|below|inside)$'
                )
            ],
            ConversationHandler.TIMEOUT: [
                TypeHandler(Update, handler.handle_timeout)
            ]
        },
        fallbacks=[
            CallbackQueryHandler(handler.cancel_organize, pattern=f'^{CANCEL_ORGANIZE}$'),
            CommandHandler("cancel", handler.cancel_organize)
        ],
        conversation_timeout=Config.CONVERSATION_TIMEOUT
    )
