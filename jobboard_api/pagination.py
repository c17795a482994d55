import math
from dataclasses import dataclass
from typing import List, Optional

WINDOW_SIZE = 5


@dataclass(frozen=True)
class Pagination:
    """Page arithmetic for one listing result."""

    total: int
    page_size: int
    current: int = 1

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        # keep the current page inside [1, total_pages]
        object.__setattr__(self, "current", self.clamp(self.current))

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(max(self.total, 0) / self.page_size))

    def clamp(self, page: int) -> int:
        return min(max(page, 1), self.total_pages)

    @property
    def has_previous(self) -> bool:
        return self.current > 1

    @property
    def has_next(self) -> bool:
        return self.current < self.total_pages

    @property
    def previous_page(self) -> Optional[int]:
        return self.current - 1 if self.has_previous else None

    @property
    def next_page(self) -> Optional[int]:
        return self.current + 1 if self.has_next else None

    def go_to(self, page: int) -> "Pagination":
        return Pagination(total=self.total, page_size=self.page_size, current=page)

    def window(self, size: int = WINDOW_SIZE) -> List[int]:
        """Up to ``size`` consecutive page numbers, centred on the current page where possible."""
        count = min(size, self.total_pages)
        start = max(1, min(self.total_pages - (size - 1), self.current - size // 2))
        return list(range(start, start + count))
