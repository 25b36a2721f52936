"""Record models — the contract between the form service and API callers.

These are intentionally decoupled from the ORM models in ``canova_db`` so
that API consumers never see database internals.  Each has a
``from_row`` constructor reading the attributes of the matching ORM row
(or any object with the same attributes, as the tests use).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from canova_flow.models.flow import Edge
from canova_flow.models.form import Page
from canova_flow.models.response import Answer


class ProjectInfo(BaseModel):
    id: str
    name: str
    total_views: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "ProjectInfo":
        return cls(
            id=str(row.id),
            name=row.name,
            total_views=row.total_views,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class FormInfo(BaseModel):
    """Owner's view of a form, including analytics counters."""

    id: str
    project_id: str
    title: str
    status: str
    visibility: str
    published_link: str | None = None
    pages: list[Page]
    total_views: int = 0
    total_responses: int = 0
    average_response_time: float = 0.0
    daily_views: dict[str, int] = {}
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "FormInfo":
        return cls(
            id=str(row.id),
            project_id=str(row.project_id),
            title=row.title,
            status=_enum_value(row.status),
            visibility=_enum_value(row.visibility),
            published_link=row.published_link,
            pages=[Page.model_validate(p) for p in row.pages],
            total_views=row.total_views,
            total_responses=row.total_responses,
            average_response_time=row.average_response_time,
            daily_views=dict(row.daily_views or {}),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class PublicForm(BaseModel):
    """What a respondent sees: no owner, sharing or analytics fields."""

    id: str
    title: str
    pages: list[Page]

    @classmethod
    def from_row(cls, row: Any) -> "PublicForm":
        return cls(
            id=str(row.id),
            title=row.title,
            pages=[Page.model_validate(p) for p in row.pages],
        )


class FlowDiagnostics(BaseModel):
    """Warnings from the last flow build, surfaced to the form author."""

    orphans: list[str] = []
    conflicts: list[Edge] = []
    missing_targets: list[Edge] = []
    unreachable: list[str] = []


class SaveResult(BaseModel):
    """Result of saving a form: the stored form plus its build warnings."""

    form: FormInfo
    diagnostics: FlowDiagnostics
    responses_deleted: int = 0
    message: str = "Form updated successfully"


class ResponseInfo(BaseModel):
    id: str
    form_id: str
    responder_id: str | None = None
    answers: list[Answer]
    time_taken_seconds: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "ResponseInfo":
        return cls(
            id=str(row.id),
            form_id=str(row.form_id),
            responder_id=row.responder_id,
            answers=[Answer.model_validate(a) for a in row.answers],
            time_taken_seconds=row.time_taken_seconds,
            created_at=row.created_at,
        )


def _enum_value(value: Any) -> str:
    return getattr(value, "value", value)
