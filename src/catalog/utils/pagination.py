import math
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class PaginationState:
    """Page-number pagination over an offset/limit query"""
    current_page: int = 1
    page_size: int = 20
    total_items: int = 0

    def __post_init__(self):
        self.page_size = max(1, self.page_size)
        self.total_items = max(0, self.total_items)
        self.current_page = max(1, self.current_page)
        self._initial = (self.current_page, self.page_size, self.total_items)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_items / self.page_size))

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1

    def set_page(self, page: int) -> None:
        self.current_page = max(1, min(page, self.total_pages))

    def next_page(self) -> None:
        if self.has_next_page:
            self.current_page += 1

    def previous_page(self) -> None:
        if self.has_previous_page:
            self.current_page -= 1

    def set_page_size(self, size: int) -> None:
        self.page_size = max(1, size)
        self.current_page = 1

    def set_total_items(self, total: int) -> None:
        self.total_items = max(0, total)
        if self.current_page > self.total_pages:
            self.current_page = self.total_pages

    def reset(self) -> None:
        self.current_page, self.page_size, self.total_items = self._initial

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "offset": self.offset,
            "has_next_page": self.has_next_page,
            "has_previous_page": self.has_previous_page,
        }
