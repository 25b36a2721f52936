"""canova_db — PostgreSQL persistence layer for projects, forms and responses.

This package provides the ORM models, async engine factory, and
repositories used by the form service and the FastAPI server.  Form pages
are stored as JSONB documents.
"""

from canova_db.engine import get_engine, get_session_factory
from canova_db.models.enums import FormStatus, FormVisibility
from canova_db.models.form import FormDocument, FormResponse, Project
from canova_db.repository import (
    FormRepository,
    ProjectRepository,
    ResponseRepository,
)

__all__ = [
    "FormDocument",
    "FormResponse",
    "FormStatus",
    "FormVisibility",
    "Project",
    "get_engine",
    "get_session_factory",
    "FormRepository",
    "ProjectRepository",
    "ResponseRepository",
]
