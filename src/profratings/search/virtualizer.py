"""
Window virtualization for long professor lists.

Only rows inside the viewport, plus an overscan margin on each side, are laid
out. Rows share a fixed estimated height.
"""

import math
from dataclasses import dataclass
from typing import List

DEFAULT_ROOT_FONT_SIZE = 16.0
DEFAULT_OVERSCAN = 5


@dataclass(frozen=True)
class VirtualItem:
    index: int
    start: float
    size: float

    @property
    def end(self) -> float:
        return self.start + self.size


def row_height_px(card_height_rem: float, root_font_size: float = 0.0) -> float:
    """Convert a card height in rem to pixels; a missing font size means 16px."""
    return card_height_rem * (root_font_size or DEFAULT_ROOT_FONT_SIZE)


class WindowVirtualizer:
    """Computes the visible slice of a fixed-row-height list."""

    def __init__(self, count: int, estimate_size: float, overscan: int = DEFAULT_OVERSCAN):
        if estimate_size <= 0:
            raise ValueError("estimate_size must be positive")
        if count < 0 or overscan < 0:
            raise ValueError("count and overscan must not be negative")
        self.count = count
        self.estimate_size = estimate_size
        self.overscan = overscan

    def get_total_size(self) -> float:
        return self.count * self.estimate_size

    def get_visible_range(self, scroll_offset: float, viewport_height: float) -> range:
        """Indices of rows intersecting the viewport, without overscan."""
        if self.count == 0 or viewport_height <= 0:
            return range(0)

        offset = max(0.0, scroll_offset)
        first = int(offset // self.estimate_size)
        last = math.ceil((offset + viewport_height) / self.estimate_size) - 1
        first = min(first, self.count)
        last = min(last, self.count - 1)
        return range(first, last + 1)

    def get_virtual_items(
        self, scroll_offset: float, viewport_height: float
    ) -> List[VirtualItem]:
        visible = self.get_visible_range(scroll_offset, viewport_height)
        if not visible:
            return []

        start = max(0, visible.start - self.overscan)
        stop = min(self.count, visible.stop + self.overscan)
        return [
            VirtualItem(index=i, start=i * self.estimate_size, size=self.estimate_size)
            for i in range(start, stop)
        ]
