from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .identifiers import sanitize_identifier

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 1000
DEFAULT_SORT = "rowid"


def clamp_limit(per_page: int) -> int:
    """LIMIT for a page request: per_page clamped to [1, MAX_PER_PAGE]."""
    return max(1, min(per_page, MAX_PER_PAGE))


def page_offset(page: int, per_page: int) -> int:
    """OFFSET for a page request; pages below 1 start at the first row."""
    return max(0, page - 1) * max(1, per_page)


def normalize_order(order: Optional[str]) -> str:
    return "DESC" if (order or "").strip().upper() == "DESC" else "ASC"


@dataclass(frozen=True)
class PageSpec:
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE
    sort: Optional[str] = None
    order: Optional[str] = None

    @property
    def limit(self) -> int:
        return clamp_limit(self.per_page)

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.per_page)

    @property
    def sort_column(self) -> str:
        # an unset sort, or one that sanitizes to nothing, sorts by rowid
        col = sanitize_identifier(self.sort) if self.sort else ""
        return col or DEFAULT_SORT

    @property
    def direction(self) -> str:
        return normalize_order(self.order)
