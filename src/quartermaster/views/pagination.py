import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int = 1
    page_size: int = 10

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")
        object.__setattr__(self, "total", max(int(self.total), 0))
        object.__setattr__(self, "page", self.clamp(self.page))

    @property
    def page_count(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def last_page(self) -> int:
        return max(self.page_count, 1)

    def clamp(self, page: int) -> int:
        return min(max(int(page), 1), self.last_page)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def previous_page(self) -> Optional[int]:
        return self.page - 1 if self.has_previous else None

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_next else None

    def go_to(self, page: int) -> "Pagination":
        return Pagination(total=self.total, page=page, page_size=self.page_size)

    def as_dict(self) -> dict:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "pageCount": self.page_count,
            "previousPage": self.previous_page,
            "nextPage": self.next_page,
            "from": self.skip + 1 if self.total else 0,
            "to": min(self.skip + self.page_size, self.total),
        }


def request_window(page: int, page_size: int) -> tuple[int, int]:
    """
    (page, skip) for a list request issued before the total is known.
    Never yields a page below 1 or a negative skip.
    """
    page = max(int(page), 1)
    return page, (page - 1) * page_size
