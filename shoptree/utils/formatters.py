# shoptree/utils/formatters.py
from ..models.category import CategoryStatus
from ..services.tree_builder import CategoryTree

INDENT = "    "

def format_tree(tree: CategoryTree, marked_id: int = None) -> str:
    """قالب‌بندی درخت دسته‌بندی‌ها به صورت متن تورفته"""
    lines = []
    for depth, category in tree.walk():
        icon = "📁" if tree.children_of(category.category_id) else "📄"
        line = f"{INDENT * depth}{icon} {category.name}"
        if category.status == CategoryStatus.DRAFT:
            line += " (پیش‌نویس)"
        if category.category_id == marked_id:
            line += " ⬅️"
        lines.append(line)
    return "\n".join(lines) if lines else "- بدون دسته‌بندی"

def format_breadcrumb(tree: CategoryTree, category_id: int) -> str:
    """مسیر دسته‌بندی از ریشه، مثل «الکترونیک › موبایل»"""
    category = tree.get(category_id)
    if category is None:
        return ""
    names = [c.name for c in tree.ancestors(category_id)] + [category.name]
    return " › ".join(names)
