"""Domain exceptions raised by the user service."""

from typing import Dict


class UserDirectoryError(Exception):
    """Base class for user directory errors."""


class UserNotFoundError(UserDirectoryError):
    """No user matches the given identifier."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"User not found with {field}: {value}")


class UserAlreadyExistsError(UserDirectoryError):
    """Another user already owns the email address."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User already exists with email: {email}")


class DataIntegrityError(UserDirectoryError):
    """The store rejected a write for a reason other than email uniqueness."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Data integrity violation: {detail}")


class ValidationFailedError(UserDirectoryError):
    """Input rejected before reaching business logic.

    `errors` maps the offending parameter name to a human-readable reason.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("Validation failed")
