"""SQLAlchemy database models for the user directory."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from userdirectory.database.database import Base
from userdirectory.models.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"
    __table_args__ = (
        # Check-then-insert in the service is not atomic; this is the real guarantee.
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
        # Never hand out an id twice on SQLite.
        {"sqlite_autoincrement": True},
    )

    # Primary key (store-assigned)
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Profile
    email = Column(String(MAX_EMAIL_LENGTH), nullable=False)
    first_name = Column(String(MAX_NAME_LENGTH), nullable=False)
    last_name = Column(String(MAX_NAME_LENGTH), nullable=False)

    # Soft-delete flag
    active = Column(Boolean, nullable=False, default=True, index=True)

    # Timestamps (set explicitly by the service)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from userdirectory.models.user import User
        return User(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            active=self.active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
