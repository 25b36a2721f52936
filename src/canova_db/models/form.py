"""Form ORM models — projects, form documents and collected responses.

A form's pages (sections, questions, branch rules and the derived
navigation graph) are stored as one JSONB document so the SDK can load a
single row and rebuild or walk the whole flow without touching other
tables.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from canova_db.models.base import Base
from canova_db.models.enums import FormStatus, FormVisibility


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """A named folder of forms owned by one user."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # External user ID injected by the authentication gateway
    owner_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # --- Analytics ---
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id!s}, owner={self.owner_id!r}, name={self.name!r})>"


class FormDocument(Base):
    """One row per form."""

    __tablename__ = "forms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # --- Lifecycle ---
    status: Mapped[FormStatus] = mapped_column(
        # Store as the lowercase string value, not the Python name
        String(20),
        nullable=False,
        default=FormStatus.DRAFT,
        index=True,
    )
    visibility: Mapped[FormVisibility] = mapped_column(
        String(20), nullable=False, default=FormVisibility.PUBLIC
    )
    published_link: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Document ---
    # List of camelCase page documents including nextPageId / prevPageId
    pages: Mapped[list] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb")
    )

    # --- Analytics ---
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_responses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Seconds
    average_response_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # {"2026-10-19": 12, ...} keyed by UTC date
    daily_views: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_form_status"),
        CheckConstraint("visibility IN ('public', 'private')", name="ck_form_visibility"),
        # Published forms must carry their public link
        CheckConstraint(
            "status != 'published' OR published_link IS NOT NULL",
            name="ck_published_has_link",
        ),
        Index("ix_forms_owner_updated", "owner_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<FormDocument(id={self.id!s}, owner={self.owner_id!r}, "
            f"title={self.title!r}, status={self.status!r})>"
        )


class FormResponse(Base):
    """One submitted response to a form."""

    __tablename__ = "form_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null for anonymous responders
    responder_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    # [{"questionId", "questionType", "value", "fileUrls"}, ...]
    answers: Mapped[list] = mapped_column(JSONB, nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        return f"<FormResponse(id={self.id!s}, form={self.form_id!s})>"
