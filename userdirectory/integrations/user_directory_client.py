"""HTTP client for the user directory API.

Mirrors what the mobile web client does: paged browsing, search with an
active/inactive filter, and the create/edit/delete form actions, with the same
user-facing error messages.
"""

import logging
import os
from typing import Any, Dict, Iterator, Optional

import requests
from dotenv import load_dotenv

from userdirectory.models.constants import DEFAULT_PAGE_SIZE, SEARCH_PAGE_SIZE
from userdirectory.models.page import Page
from userdirectory.models.user import User, UserCreate, UserUpdate

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api/users"

ACTIVE_FILTERS = {
    "all": None,
    "active": "true",
    "inactive": "false",
}

CONNECTION_ERROR_MESSAGE = "Unable to connect to server. Please check your connection."
STATUS_MESSAGES = {
    404: "User not found.",
    400: "Invalid user data. Please check your input.",
    409: "A user with this email already exists.",
    500: "Server error. Please try again later.",
}
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class UserDirectoryClientError(Exception):
    """A request to the user directory failed.

    `status_code` is 0 when the server could not be reached.
    """

    def __init__(self, status_code: int, message: str, body: Optional[dict] = None):
        self.status_code = status_code
        self.message = message
        self.body = body or {}
        super().__init__(message)


class UserDirectoryClient:
    """Client for the user directory REST API."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            base_url: Users collection URL. If None, reads USER_DIRECTORY_API_URL.
            timeout: Per-request timeout in seconds
            session: Optional requests session (connection reuse, testing)
        """
        self.base_url = (base_url or os.getenv("USER_DIRECTORY_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}

    def get_users(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> Page[User]:
        """Fetch one page of users in default order."""
        data = self._request("GET", self.base_url, params={"page": page, "size": size})
        return Page[User].model_validate(data)

    def search_users(self, query: str = "", active_filter: str = "all") -> Page[User]:
        """Search users by name or email, optionally restricted to active or inactive users.

        Args:
            query: Free-text search (blank = no search filter)
            active_filter: One of "all", "active", "inactive"

        Returns:
            First page of matches (up to SEARCH_PAGE_SIZE)
        """
        if active_filter not in ACTIVE_FILTERS:
            raise ValueError(f"active_filter must be one of {sorted(ACTIVE_FILTERS)}")

        params: Dict[str, Any] = {"page": 0, "size": SEARCH_PAGE_SIZE}
        if query:
            params["search"] = query
        if ACTIVE_FILTERS[active_filter] is not None:
            params["active"] = ACTIVE_FILTERS[active_filter]

        data = self._request("GET", self.base_url, params=params)
        return Page[User].model_validate(data)

    def iter_all_users(self, size: int = DEFAULT_PAGE_SIZE) -> Iterator[User]:
        """Walk every page (infinite-scroll style) until the last one."""
        page = 0
        while True:
            result = self.get_users(page=page, size=size)
            yield from result.content
            if result.last:
                return
            page += 1

    def get_user(self, user_id: int) -> User:
        data = self._request("GET", f"{self.base_url}/{user_id}")
        return User.model_validate(data)

    def get_user_by_email(self, email: str) -> User:
        data = self._request("GET", f"{self.base_url}/by-email", params={"email": email})
        return User.model_validate(data)

    def create_user(self, request: UserCreate) -> User:
        data = self._request("POST", self.base_url, json=request.model_dump(by_alias=True))
        return User.model_validate(data)

    def update_user(self, user_id: int, request: UserUpdate) -> User:
        """Send only the fields that were set on `request`."""
        payload = request.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        data = self._request("PUT", f"{self.base_url}/{user_id}", json=payload)
        return User.model_validate(data)

    def delete_user(self, user_id: int) -> None:
        self._request("DELETE", f"{self.base_url}/{user_id}")

    def _request(self, method: str, url: str, **kwargs) -> Optional[dict]:
        try:
            response = self.session.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {type(e).__name__}: {str(e)}")
            raise UserDirectoryClientError(0, CONNECTION_ERROR_MESSAGE) from e

        if not response.ok:
            raise self._error_for(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _error_for(self, response: requests.Response) -> UserDirectoryClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        status_code = response.status_code
        message = STATUS_MESSAGES.get(status_code, GENERIC_ERROR_MESSAGE)
        if status_code == 400 and body.get("message"):
            message = body["message"]
        logger.warning(f"User directory returned {status_code}: {body.get('message', '')}")
        return UserDirectoryClientError(status_code, message, body)
