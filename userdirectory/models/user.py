"""User data models for the user directory."""

from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from userdirectory.models.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH


def _check_email(value: str) -> str:
    """Validate email shape; the address is kept exactly as given."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise PydanticCustomError("value_error", "value is not a valid email address: {reason}", {"reason": str(e)}) from e
    return value


def _check_not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("string_blank", "Value must not be blank")
    return value


EmailAddress = Annotated[
    str,
    Field(min_length=1, max_length=MAX_EMAIL_LENGTH),
    AfterValidator(_check_email),
]
PersonName = Annotated[
    str,
    Field(min_length=1, max_length=MAX_NAME_LENGTH),
    AfterValidator(_check_not_blank),
]


class User(BaseModel):
    """User as stored in the directory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(..., description="Store-assigned identifier")
    email: str = Field(..., description="Unique email address")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    active: bool = Field(True, description="False once the user has been soft-deleted")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last mutation timestamp")


class UserCreate(BaseModel):
    """Request body for creating a user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailAddress
    first_name: PersonName
    last_name: PersonName


class UserUpdate(BaseModel):
    """Partial update request.

    Only fields the caller actually supplied are applied. A field left out of the
    request body, or sent as null, leaves the stored value untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[EmailAddress] = None
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    active: Optional[bool] = None

    def provided_fields(self) -> Dict[str, Any]:
        """Return the supplied, non-null fields keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
