"""Constants shared across the canova_flow SDK.

Several values can be overridden via environment variables so that
deployments can point at a different asset host or tune pagination
without code changes.
"""

import os

# Substring identifying media URLs hosted on the third-party asset host.
# Only such URLs are considered for cleanup when a form stops using them.
MEDIA_HOST_MARKER = os.getenv("MEDIA_HOST_MARKER", "cloudinary.com")

# Question types that carry an uploaded media URL.
MEDIA_QUESTION_TYPES: set[str] = {"image", "video"}

# Question types whose answers are lists (multi-select).
MULTI_VALUE_QUESTION_TYPES: set[str] = {"checkbox"}

# Form lifecycle / visibility values stored on the form document.
FORM_STATUSES: tuple[str, ...] = ("draft", "published")
FORM_VISIBILITIES: tuple[str, ...] = ("public", "private")

# Name of the page and section a new form starts with.
DEFAULT_FIRST_PAGE_NAME = "Page 01"
DEFAULT_SECTION_NAME = "Default Section"

# Path under the frontend URL where published forms are served.
PUBLIC_FORM_PATH = "/forms/public"

# Pagination defaults for list endpoints.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))
