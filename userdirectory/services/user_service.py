"""User service: the single authority for user invariants.

All mutations pass through here. Email uniqueness is checked before writing, and
the store's unique constraint catches the races the check cannot see: both paths
surface as UserAlreadyExistsError.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from userdirectory.database.user_repository import UserRepository, is_email_conflict
from userdirectory.engine.pagination import build_page
from userdirectory.engine.query_filter import build_user_filter
from userdirectory.models.page import Page, PageRequest
from userdirectory.models.user import User, UserCreate, UserUpdate
from userdirectory.services.exceptions import (
    DataIntegrityError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class UserService:
    """Create/read/update/soft-delete operations on users."""

    def __init__(self, repository: UserRepository, clock: Callable[[], datetime] = datetime.utcnow):
        self.repository = repository
        self.clock = clock

    def create_user(self, request: UserCreate) -> User:
        """Create an active user.

        Raises:
            UserAlreadyExistsError: If the email is already taken
        """
        if self.repository.exists_by_email(request.email):
            logger.warning(f"Rejected create: email already registered ({request.email})")
            raise UserAlreadyExistsError(request.email)

        try:
            return self.repository.create(request, now=self.clock())
        except IntegrityError as e:
            raise self._translate_integrity_error(e, request.email) from e

    def get_user(self, user_id: int) -> User:
        """Get a user by id, including soft-deleted users.

        Raises:
            UserNotFoundError: If no user has this id
        """
        user = self.repository.get(user_id)
        if user is None:
            raise UserNotFoundError("id", user_id)
        return user

    def get_user_by_email(self, email: str) -> User:
        """Get a user by exact email.

        Raises:
            UserNotFoundError: If no user has this email
        """
        user = self.repository.get_by_email(email)
        if user is None:
            raise UserNotFoundError("email", email)
        return user

    def list_users(
        self,
        page_request: Optional[PageRequest] = None,
        active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Page[User]:
        """Return one page of users matching the search text and active filter."""
        page_request = page_request or PageRequest()
        condition = build_user_filter(search=search, active=active)
        users, total = self.repository.find_page(condition, page_request)
        return build_page(users, total, page_request)

    def update_user(self, user_id: int, request: UserUpdate) -> User:
        """Apply the supplied fields of `request`; omitted fields stay untouched.

        Raises:
            UserNotFoundError: If no user has this id
            UserAlreadyExistsError: If the new email belongs to another user
        """
        current = self.get_user(user_id)
        changes = request.provided_fields()

        new_email = changes.get("email")
        if new_email is not None and new_email != current.email:
            if self.repository.exists_by_email(new_email, exclude_id=user_id):
                logger.warning(f"Rejected update of user {user_id}: email already registered ({new_email})")
                raise UserAlreadyExistsError(new_email)

        try:
            return self.repository.update(user_id, changes, now=self.clock())
        except IntegrityError as e:
            raise self._translate_integrity_error(e, new_email) from e

    def delete_user(self, user_id: int) -> None:
        """Soft-delete a user by clearing its active flag.

        Deleting an already-inactive user is a no-op.

        Raises:
            UserNotFoundError: If no user has this id
        """
        current = self.get_user(user_id)
        if not current.active:
            logger.debug(f"User {user_id} already inactive; nothing to delete")
            return
        self.repository.update(user_id, {"active": False}, now=self.clock())
        logger.info(f"Soft-deleted user {user_id}")

    def _translate_integrity_error(self, exc: IntegrityError, email: Optional[str]) -> Exception:
        if email is not None and is_email_conflict(exc):
            logger.warning(f"Unique constraint rejected email {email}")
            return UserAlreadyExistsError(email)
        return DataIntegrityError(str(getattr(exc, "orig", exc)))
