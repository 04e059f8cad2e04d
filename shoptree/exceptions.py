# shoptree/exceptions.py
from typing import Iterable, Optional


class OrganizerError(Exception):
    """Base error for the category organizer"""


class PersistError(OrganizerError):
    """The category store could not complete a write"""


class RecordMissing(PersistError):
    """A write referenced a category that no longer exists in the store"""

    def __init__(self, category_ids: Iterable[int], message: Optional[str] = None):
        self.category_ids = sorted(set(category_ids))
        super().__init__(message or f"Categories not found: {self.category_ids}")


class ReorderError(OrganizerError):
    """A drop gesture could not be applied"""


class CycleRejected(ReorderError):
    """The move would nest a category under itself or one of its descendants"""

    def __init__(self, moved_id: int, target_id: int):
        self.moved_id = moved_id
        self.target_id = target_id
        super().__init__(
            f"Category {moved_id} cannot be moved into its own subtree (target {target_id})"
        )


class PersistFailed(ReorderError):
    """The store write failed; the tree was left as it was"""

    def __init__(self, moved_id: int, cause: Optional[Exception] = None):
        self.moved_id = moved_id
        self.cause = cause
        super().__init__(f"Could not save new position of category {moved_id}: {cause}")


class StaleSnapshot(ReorderError):
    """The snapshot used for the move no longer matches the store"""

    def __init__(self, category_ids: Iterable[int]):
        self.category_ids = sorted(set(category_ids))
        super().__init__(f"Snapshot is out of date, missing categories: {self.category_ids}")
