"""Sort parsing and page arithmetic.

Sort parameters follow the `field[,direction]` convention used by the web client,
e.g. `sort=lastName,desc&sort=firstName`. Field names may be given in the API
spelling (camelCase) or the attribute spelling (snake_case).
"""

import math
from typing import Iterable, List, Optional, Sequence, TypeVar

from userdirectory.models.page import Page, Pageable, PageRequest, SortDirection, SortOrder

T = TypeVar("T")


class InvalidSortError(ValueError):
    """A `sort` parameter names an unknown field or direction."""


SORTABLE_FIELDS = {
    "id": "id",
    "email": "email",
    "firstName": "first_name",
    "first_name": "first_name",
    "lastName": "last_name",
    "last_name": "last_name",
    "active": "active",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}


def parse_sort(values: Optional[Iterable[str]]) -> List[SortOrder]:
    """Parse `field[,asc|desc]` strings into sort orders.

    Args:
        values: Raw `sort` query parameter values (may be None)

    Returns:
        Sort orders in the given order; `id ASC` when nothing usable was supplied

    Raises:
        InvalidSortError: If a field or direction is not recognized
    """
    orders: List[SortOrder] = []
    for raw in values or []:
        parts = [part.strip() for part in raw.split(",")]
        name = parts[0]
        if not name:
            continue
        attribute = SORTABLE_FIELDS.get(name)
        if attribute is None:
            raise InvalidSortError(f"Cannot sort by unknown property '{name}'")

        direction = SortDirection.ASC
        if len(parts) > 2:
            raise InvalidSortError(f"Malformed sort expression '{raw}'")
        if len(parts) == 2 and parts[1]:
            try:
                direction = SortDirection(parts[1].lower())
            except ValueError:
                raise InvalidSortError(f"Invalid sort direction '{parts[1]}' (expected asc or desc)") from None
        orders.append(SortOrder(field=attribute, direction=direction))

    if not orders:
        orders.append(SortOrder(field="id"))
    return orders


def with_id_tiebreak(orders: Sequence[SortOrder]) -> List[SortOrder]:
    """Append `id ASC` unless id already participates, making the ordering total."""
    result = list(orders)
    if not any(order.field == "id" for order in result):
        result.append(SortOrder(field="id"))
    return result


def total_pages(total: int, size: int) -> int:
    """Number of pages needed for `total` rows (0 for an empty result)."""
    if total <= 0:
        return 0
    return math.ceil(total / size)


def build_page(items: List[T], total: int, request: PageRequest) -> Page[T]:
    """Wrap a slice of results with pagination metadata."""
    pages = total_pages(total, request.size)
    return Page(
        content=items,
        total_elements=total,
        total_pages=pages,
        size=request.size,
        number=request.page,
        number_of_elements=len(items),
        first=request.page == 0,
        last=request.page >= pages - 1,
        empty=len(items) == 0,
        pageable=Pageable(page_number=request.page, page_size=request.size),
    )
