"""Constants for the user directory.

This module centralizes all limits and default values used throughout the application.
"""

# Field limits
MAX_EMAIL_LENGTH = 100
MAX_NAME_LENGTH = 100

# Pagination
DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 2000
SEARCH_PAGE_SIZE = 100  # Larger pages for interactive search results

# Escape character used for LIKE patterns
LIKE_ESCAPE_CHAR = "\\"
