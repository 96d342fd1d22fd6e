"""Pagination models for the user directory."""

from enum import Enum
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from userdirectory.models.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


class SortDirection(str, Enum):
    """Sort direction enumeration."""
    ASC = "asc"
    DESC = "desc"


class SortOrder(BaseModel):
    """A single sort key (attribute name + direction)."""

    field: str
    direction: SortDirection = SortDirection.ASC


class PageRequest(BaseModel):
    """Zero-based page request with ordering."""

    page: int = Field(DEFAULT_PAGE, ge=0, description="Zero-based page index")
    size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size")
    sort: List[SortOrder] = Field(
        default_factory=lambda: [SortOrder(field="id")],
        description="Ordering, applied left to right",
    )

    @property
    def offset(self) -> int:
        return self.page * self.size


class Pageable(BaseModel):
    """Echo of the requested page, as read by the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page_number: int
    page_size: int


class Page(BaseModel, Generic[T]):
    """A slice of results plus pagination metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: List[T]
    total_elements: int
    total_pages: int
    size: int
    number: int
    number_of_elements: int
    first: bool
    last: bool
    empty: bool
    pageable: Pageable
