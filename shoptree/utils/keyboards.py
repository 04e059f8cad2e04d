# shoptree/utils/keyboards.py
from typing import Optional
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..constants import PICK_PREFIX, TARGET_PREFIX, DROP_PREFIX, CANCEL_ORGANIZE
from ..models.category import DropIntent
from ..services.tree_builder import CategoryTree
from .formatters import INDENT

class Keyboards:
    @staticmethod
    def category_picker(tree: CategoryTree, prefix: str = PICK_PREFIX,
                        exclude_id: Optional[int] = None) -> InlineKeyboardMarkup:
        """کیبورد انتخاب دسته‌بندی به ترتیب درخت"""
        keyboard = []
        for depth, category in tree.walk():
            if category.category_id == exclude_id:
                continue
            keyboard.append([InlineKeyboardButton(
                f"{INDENT * depth}{category.name}",
                callback_data=f"{prefix}{category.category_id}"
            )])
        keyboard.append([InlineKeyboardButton("🔙 انصراف", callback_data=CANCEL_ORGANIZE)])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def target_picker(tree: CategoryTree, moved_id: int) -> InlineKeyboardMarkup:
        """کیبورد انتخاب دسته‌بندی هدف"""
        return Keyboards.category_picker(tree, prefix=TARGET_PREFIX, exclude_id=moved_id)

    @staticmethod
    def drop_position() -> InlineKeyboardMarkup:
        """کیبورد انتخاب محل قرارگیری نسبت به هدف"""
        keyboard = [
            [InlineKeyboardButton("⬆️ بالای آن", callback_data=f"{DROP_PREFIX}{DropIntent.ABOVE.value}")],
            [InlineKeyboardButton("📂 داخل آن", callback_data=f"{DROP_PREFIX}{DropIntent.INSIDE.value}")],
            [InlineKeyboardButton("⬇️ پایین آن", callback_data=f"{DROP_PREFIX}{DropIntent.BELOW.value}")],
            [InlineKeyboardButton("🔙 انصراف", callback_data=CANCEL_ORGANIZE)]
        ]
        return InlineKeyboardMarkup(keyboard)
