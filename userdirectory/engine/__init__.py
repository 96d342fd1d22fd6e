"""Query engine for the user directory."""

from userdirectory.engine.query_filter import (
    AllOf,
    FieldEquals,
    MatchAll,
    TextSearch,
    build_user_filter,
    escape_like,
    like_pattern,
)
from userdirectory.engine.pagination import InvalidSortError, build_page, parse_sort, total_pages, with_id_tiebreak

__all__ = [
    "AllOf",
    "InvalidSortError",
    "FieldEquals",
    "MatchAll",
    "TextSearch",
    "build_user_filter",
    "escape_like",
    "like_pattern",
    "build_page",
    "parse_sort",
    "total_pages",
    "with_id_tiebreak",
]
