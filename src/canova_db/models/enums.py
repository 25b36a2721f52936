"""Database-level enumerations for forms."""

import enum


class FormStatus(str, enum.Enum):
    """Lifecycle states for a form.

    Transitions:
        draft -> published      (owner publishes)
        published -> draft      (page content edited after publishing;
                                 collected responses are discarded)
    """

    DRAFT = "draft"
    PUBLISHED = "published"


class FormVisibility(str, enum.Enum):
    """Who may open and submit a published form."""

    PUBLIC = "public"
    PRIVATE = "private"
