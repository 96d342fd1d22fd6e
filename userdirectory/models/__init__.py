"""Data models for the user directory."""

from userdirectory.models.user import User, UserCreate, UserUpdate
from userdirectory.models.page import Page, PageRequest, Pageable, SortDirection, SortOrder

__all__ = [
    "User",
    "UserCreate",
    "UserUpdate",
    "Page",
    "PageRequest",
    "Pageable",
    "SortDirection",
    "SortOrder",
]
