# shoptree/constants.py
# Conversation states of the category organizer
(
    WAITING_MOVED_CATEGORY,
    WAITING_TARGET_CATEGORY,
    WAITING_DROP_POSITION,
) = range(3)

# Callback data prefixes
ORGANIZE_CATEGORIES = "organize_categories"
PICK_PREFIX = "org_pick_"
TARGET_PREFIX = "org_target_"
DROP_PREFIX = "org_drop_"
CANCEL_ORGANIZE = "org_cancel"
