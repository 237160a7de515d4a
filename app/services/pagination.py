from dataclasses import dataclass, field
from typing import Generic, TypeVar

from app.domain.rules import page_offset, total_pages

T = TypeVar("T")


@dataclass(slots=True)
class PageRequest:
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.limit)


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)
