"""FastAPI web application for the user directory."""

import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from userdirectory.api.errors import ErrorResponse, field_message, register_exception_handlers
from userdirectory.database.database import get_db, init_db
from userdirectory.database.user_repository import UserRepository
from userdirectory.engine.pagination import InvalidSortError, parse_sort
from userdirectory.models.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from userdirectory.models.page import Page, PageRequest
from userdirectory.models.user import EmailAddress, User, UserCreate, UserUpdate
from userdirectory.services.exceptions import ValidationFailedError
from userdirectory.services.user_service import UserService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"
DEFAULT_CORS_ORIGINS = "http://localhost:8100,http://localhost:4200"
EMAIL_ADAPTER = TypeAdapter(EmailAddress)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("User directory API started")
    yield


app = FastAPI(
    title="User Directory API",
    description="Create, browse, search, edit and soft-delete directory users",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    404: {"model": ErrorResponse, "description": "User not found"},
    409: {"model": ErrorResponse, "description": "Email already in use"},
}


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Build a UserService bound to the request's database session."""
    return UserService(UserRepository(db))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.post(
    "/api/users",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={400: ERROR_RESPONSES[400], 409: ERROR_RESPONSES[409]},
)
def create_user(request: UserCreate, service: UserService = Depends(get_user_service)):
    """Create a user."""
    return service.create_user(request)


@app.get("/api/users", response_model=Page[User], responses={400: ERROR_RESPONSES[400]})
def list_users(
    page: int = Query(DEFAULT_PAGE, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: Optional[List[str]] = Query(None, description="field[,asc|desc], repeatable"),
    active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
    service: UserService = Depends(get_user_service),
):
    """List users, paginated, optionally filtered by active flag and search text."""
    try:
        orders = parse_sort(sort)
    except InvalidSortError as e:
        raise ValidationFailedError({"sort": str(e)}) from None
    page_request = PageRequest(page=page, size=size, sort=orders)
    return service.list_users(page_request, active=active, search=search)


@app.get(
    "/api/users/by-email",
    response_model=User,
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404]},
)
def get_user_by_email(
    email: str = Query(..., description="Exact, case-sensitive email"),
    service: UserService = Depends(get_user_service),
):
    """Get a user by exact email."""
    try:
        EMAIL_ADAPTER.validate_python(email)
    except ValidationError as e:
        raise ValidationFailedError({"email": field_message("email", e.errors()[0])}) from None
    return service.get_user_by_email(email)


@app.get("/api/users/{user_id}", response_model=User, responses={404: ERROR_RESPONSES[404]})
def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Get a user by id (soft-deleted users included)."""
    return service.get_user(user_id)


@app.put(
    "/api/users/{user_id}",
    response_model=User,
    responses={400: ERROR_RESPONSES[400], 404: ERROR_RESPONSES[404], 409: ERROR_RESPONSES[409]},
)
def update_user(user_id: int, request: UserUpdate, service: UserService = Depends(get_user_service)):
    """Partially update a user; omitted fields are left unchanged."""
    return service.update_user(user_id, request)


@app.delete(
    "/api/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: ERROR_RESPONSES[404]},
)
def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Soft-delete a user (sets active=false)."""
    service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
