# shoptree/services/drop_intent.py
from ..models.category import DropIntent


class DropIntentClassifier:
    """Maps the pointer position inside a target row to a drop intent.

    The top quarter of a row means "insert above", the bottom quarter
    "insert below" and the middle half "nest inside".
    """

    def __init__(self, above_threshold: float = 0.25, below_threshold: float = 0.75):
        if not 0 < above_threshold < 0.5 < below_threshold < 1:
            raise ValueError(
                f"Invalid drop thresholds: above={above_threshold}, below={below_threshold}"
            )
        self.above_threshold = above_threshold
        self.below_threshold = below_threshold

    def classify(self, offset: float) -> DropIntent:
        offset = min(max(offset, 0.0), 1.0)
        if offset < self.above_threshold:
            return DropIntent.ABOVE
        if offset > self.below_threshold:
            return DropIntent.BELOW
        return DropIntent.INSIDE

    def classify_pointer(self, pointer_y: float, row_top: float, row_height: float) -> DropIntent:
        return self.classify(offset_within_row(pointer_y, row_top, row_height))


def offset_within_row(pointer_y: float, row_top: float, row_height: float) -> float:
    """Relative vertical position of the pointer: 0 at the top, 1 at the bottom"""
    if row_height <= 0:
        return 0.5
    return min(max((pointer_y - row_top) / row_height, 0.0), 1.0)


def classify_drop(offset: float, above_threshold: float = 0.25,
                  below_threshold: float = 0.75) -> DropIntent:
    return DropIntentClassifier(above_threshold, below_threshold).classify(offset)
