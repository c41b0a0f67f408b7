"""
Filter, sort and pagination state for resource panels.

Client-side panels filter an already fetched list with predicates built from
`contains_text`; server-side panels turn `SortState` and `PageState` into
query parameters and refetch on every change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from portal.api.schemas import Pagination

T = TypeVar("T")


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def contains_text(value: Optional[str], term: str) -> bool:
    """Case-insensitive substring match; an empty term matches everything."""
    if not term:
        return True
    return bool(value) and term.lower() in value.lower()


def matches_flag(value: bool, wanted: Optional[bool]) -> bool:
    return wanted is None or value == wanted


def apply_filters(items: Iterable[T], *predicates: Callable[[T], bool]) -> List[T]:
    return [item for item in items if all(p(item) for p in predicates)]


def parse_status_filter(choice: str) -> Optional[bool]:
    """Map the "all / active / inactive" select onto an optional bool."""
    if choice == "all":
        return None
    if choice in ("active", "inactive"):
        return choice == "active"
    raise ValueError(f"Unknown status filter: {choice!r}")


@dataclass
class SortState:
    field: str = "name"
    order: SortOrder = SortOrder.ASC

    def toggle(self, field: str) -> None:
        """Same field flips direction, a new field starts ascending."""
        if field == self.field:
            self.order = SortOrder.DESC if self.order == SortOrder.ASC else SortOrder.ASC
        else:
            self.field = field
            self.order = SortOrder.ASC

    def to_params(self) -> Dict[str, Any]:
        return {"sortBy": self.field, "sortOrder": self.order.value}


@dataclass
class PageState:
    page: int = 1
    limit: int = 10
    total_pages: int = 1
    total: int = 0

    def clamp(self, page: int) -> int:
        if page > self.total_pages:
            page = self.total_pages
        if page < 1:
            page = 1
        return page

    def update_from(self, pagination: Optional[Pagination], total: Optional[int] = None) -> None:
        if pagination is None:
            return
        self.page = pagination.page
        self.limit = pagination.limit
        self.total_pages = max(pagination.total_pages, 1)
        self.total = total if total is not None else pagination.total

    def to_params(self) -> Dict[str, Any]:
        return {"page": self.page, "limit": self.limit}
