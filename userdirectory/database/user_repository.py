"""Repository for User database operations."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, asc, desc, func, or_, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from userdirectory.database.models import EMAIL_UNIQUE_CONSTRAINT, UserDB
from userdirectory.engine.pagination import with_id_tiebreak
from userdirectory.engine.query_filter import AllOf, FieldEquals, MatchAll, TextSearch, like_pattern
from userdirectory.models.constants import LIKE_ESCAPE_CHAR
from userdirectory.models.page import PageRequest, SortDirection
from userdirectory.models.user import User, UserCreate

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("email", "first_name", "last_name", "active")


def is_email_conflict(exc: IntegrityError) -> bool:
    """Whether an IntegrityError came from the users.email unique constraint."""
    message = str(getattr(exc, "orig", exc))
    return EMAIL_UNIQUE_CONSTRAINT in message or "users.email" in message


def to_clause(condition):
    """Translate a filter condition into a SQLAlchemy boolean clause."""
    if isinstance(condition, MatchAll):
        return true()
    if isinstance(condition, TextSearch):
        pattern = like_pattern(condition.term)
        return or_(*[
            func.lower(getattr(UserDB, name)).like(pattern, escape=LIKE_ESCAPE_CHAR)
            for name in condition.fields
        ])
    if isinstance(condition, FieldEquals):
        return getattr(UserDB, condition.field) == condition.value
    if isinstance(condition, AllOf):
        if not condition.conditions:
            return true()
        return and_(*[to_clause(c) for c in condition.conditions])
    raise TypeError(f"Unsupported filter condition: {condition!r}")


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, user_id: int) -> Optional[UserDB]:
        return self.db.query(UserDB).filter(UserDB.id == user_id).first()

    def get(self, user_id: int) -> Optional[User]:
        """Get user by ID (active or not)."""
        user_db = self._get_db(user_id)
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by exact email."""
        user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        return user_db.to_pydantic() if user_db else None

    def exists_by_email(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """Check whether any user (optionally other than `exclude_id`) has this email."""
        query = self.db.query(UserDB.id).filter(UserDB.email == email)
        if exclude_id is not None:
            query = query.filter(UserDB.id != exclude_id)
        return self.db.query(query.exists()).scalar()

    def create(self, user: UserCreate, now: datetime) -> User:
        """Insert a new active user; the store assigns the id."""
        user_db = UserDB(
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            active=True,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {user_db.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {user.email}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, user_id: int, changes: Dict[str, Any], now: datetime) -> User:
        """Apply column changes to an existing user and refresh updated_at."""
        user_db = self._get_db(user_id)
        if not user_db:
            raise ValueError(f"User {user_id} not found")

        for name, value in changes.items():
            if name not in UPDATABLE_COLUMNS:
                raise ValueError(f"Column {name} cannot be updated")
            setattr(user_db, name, value)
        user_db.updated_at = now

        try:
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Updated user {user_id}: {sorted(changes)}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def count(self, condition=None) -> int:
        """Count users matching a filter condition."""
        clause = to_clause(condition if condition is not None else MatchAll())
        return self.db.query(func.count(UserDB.id)).filter(clause).scalar()

    def find_page(self, condition, page_request: PageRequest) -> Tuple[List[User], int]:
        """Return one page of users matching `condition` and the total match count."""
        clause = to_clause(condition)
        total = self.count(condition)

        ordering = []
        for order in with_id_tiebreak(page_request.sort):
            column = getattr(UserDB, order.field)
            ordering.append(desc(column) if order.direction == SortDirection.DESC else asc(column))

        users_db = (
            self.db.query(UserDB)
            .filter(clause)
            .order_by(*ordering)
            .offset(page_request.offset)
            .limit(page_request.size)
            .all()
        )
        return [user_db.to_pydantic() for user_db in users_db], total
