"""ORM models for canova_db."""

from canova_db.models.base import Base
from canova_db.models.enums import FormStatus, FormVisibility
from canova_db.models.form import FormDocument, FormResponse, Project

__all__ = [
    "Base",
    "FormStatus",
    "FormVisibility",
    "FormDocument",
    "FormResponse",
    "Project",
]
