"""User search filter composition.

Builds a persistence-independent predicate from the optional `search` and `active`
list parameters. Conditions are plain value objects combined with AND; the
database layer translates them into SQL, and `matches()` evaluates them in memory.

Search terms are matched as literals: LIKE metacharacters supplied by the caller
(`%`, `_` and the escape character itself) are escaped before the pattern is built,
so a search for "%" only matches users that literally contain a percent sign.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from userdirectory.models.constants import LIKE_ESCAPE_CHAR
from userdirectory.models.user import User

SEARCHABLE_FIELDS: Tuple[str, ...] = ("first_name", "last_name", "email")


def escape_like(term: str, escape: str = LIKE_ESCAPE_CHAR) -> str:
    """Escape LIKE wildcards so the term is matched literally.

    The escape character is doubled first; escaping it after the wildcards would
    double the escapes that were just introduced.

    Args:
        term: Raw user input
        escape: Escape character passed to the LIKE ... ESCAPE clause

    Returns:
        Term safe to embed in a LIKE pattern
    """
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


def like_pattern(term: str, escape: str = LIKE_ESCAPE_CHAR) -> str:
    """Build a case-insensitive "contains" pattern for a lower()-ed column."""
    return f"%{escape_like(term.lower(), escape)}%"


@dataclass(frozen=True)
class MatchAll:
    """Tautology: matches every row."""

    def matches(self, user: User) -> bool:
        return True


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match over any of `fields`."""

    term: str
    fields: Tuple[str, ...] = SEARCHABLE_FIELDS

    def matches(self, user: User) -> bool:
        needle = self.term.lower()
        return any(needle in str(getattr(user, name)).lower() for name in self.fields)


@dataclass(frozen=True)
class FieldEquals:
    """Exact equality on a single attribute."""

    field: str
    value: Any

    def matches(self, user: User) -> bool:
        return getattr(user, self.field) == self.value


@dataclass(frozen=True)
class AllOf:
    """Logical AND of sub-conditions (empty = match all)."""

    conditions: Tuple[Any, ...] = ()

    def matches(self, user: User) -> bool:
        return all(condition.matches(user) for condition in self.conditions)


def search_condition(search: Optional[str]):
    """Condition for the free-text search box; blank input matches everything."""
    if search is None or not search.strip():
        return MatchAll()
    return TextSearch(term=search)


def active_condition(active: Optional[bool]):
    """Condition for the active filter; None matches everything."""
    if active is None:
        return MatchAll()
    return FieldEquals(field="active", value=active)


def build_user_filter(search: Optional[str] = None, active: Optional[bool] = None) -> AllOf:
    """Combine search and active conditions with AND."""
    return AllOf(conditions=(search_condition(search), active_condition(active)))
