"""Async CRUD repositories for projects, forms and responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries (useful for composing multiple writes in the
service layer).  Methods ``flush()`` but never ``commit()``.

The repositories deliberately avoid business-logic validation (ownership,
publication state, flow building) — that belongs in
:class:`canova_flow.service.FormService`.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from canova_db.models.enums import FormStatus, FormVisibility
from canova_db.models.form import FormDocument, FormResponse, Project


class ProjectRepository:
    """Async read/write operations on the ``projects`` table."""

    async def create(self, db: AsyncSession, *, owner_id: str, name: str) -> Project:
        """Insert a new project row and return it."""
        project = Project(owner_id=owner_id, name=name)
        db.add(project)
        await db.flush()  # Populate defaults (id, timestamps)
        return project

    async def get_by_id(self, db: AsyncSession, project_id: uuid.UUID) -> Project | None:
        return await db.get(Project, project_id)

    async def list_by_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Project]:
        """List a user's projects, most recent first."""
        stmt = (
            select(Project)
            .where(Project.owner_id == owner_id)
            .order_by(Project.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def rename(self, db: AsyncSession, project: Project, name: str) -> Project:
        project.name = name
        project.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return project

    async def increment_views(self, db: AsyncSession, project: Project) -> Project:
        project.total_views += 1
        await db.flush()
        return project

    async def delete(self, db: AsyncSession, project: Project) -> None:
        await db.delete(project)
        await db.flush()


class FormRepository:
    """Async read/write operations on the ``forms`` table."""

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        *,
        project_id: uuid.UUID,
        owner_id: str,
        title: str,
        pages: list[dict[str, Any]],
    ) -> FormDocument:
        """Insert a new draft form and return it."""
        form = FormDocument(
            project_id=project_id,
            owner_id=owner_id,
            title=title,
            pages=pages,
            status=FormStatus.DRAFT,
            visibility=FormVisibility.PUBLIC,
            daily_views={},
        )
        db.add(form)
        await db.flush()
        return form

    async def get_by_id(self, db: AsyncSession, form_id: uuid.UUID) -> FormDocument | None:
        return await db.get(FormDocument, form_id)

    async def list_by_project(
        self, db: AsyncSession, project_id: uuid.UUID
    ) -> list[FormDocument]:
        """List the forms of a project, most recent first."""
        stmt = (
            select(FormDocument)
            .where(FormDocument.project_id == project_id)
            .order_by(FormDocument.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update: document
    # ------------------------------------------------------------------

    async def save_document(
        self,
        db: AsyncSession,
        form: FormDocument,
        *,
        title: str | None = None,
        pages: list[dict[str, Any]] | None = None,
        visibility: FormVisibility | None = None,
        status: FormStatus | None = None,
    ) -> FormDocument:
        """Overwrite the given document fields; ``None`` leaves a field as is.

        ``pages`` is replaced wholesale, never merged, so stale derived
        links cannot survive a structural edit.
        """
        if title is not None:
            form.title = title
        if pages is not None:
            form.pages = pages
        if visibility is not None:
            form.visibility = visibility
        if status is not None:
            form.status = status
        form.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return form

    async def publish(self, db: AsyncSession, form: FormDocument, link: str) -> FormDocument:
        form.status = FormStatus.PUBLISHED
        form.published_link = link
        form.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return form

    async def revert_to_draft(self, db: AsyncSession, form: FormDocument) -> FormDocument:
        """Unpublish and zero the response counters."""
        form.status = FormStatus.DRAFT
        form.total_responses = 0
        form.average_response_time = 0.0
        form.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return form

    # ------------------------------------------------------------------
    # Update: analytics
    # ------------------------------------------------------------------

    async def record_view(self, db: AsyncSession, form: FormDocument, day: date) -> FormDocument:
        """Count one public view, overall and for *day*."""
        key = day.isoformat()
        # Shallow-copy to ensure SQLAlchemy detects the mutation
        views = {**form.daily_views}
        views[key] = views.get(key, 0) + 1
        form.daily_views = views
        form.total_views += 1
        await db.flush()
        return form

    async def record_response(
        self, db: AsyncSession, form: FormDocument, time_taken_seconds: int
    ) -> FormDocument:
        """Count one response and fold its duration into the running mean."""
        count = form.total_responses + 1
        form.average_response_time = (
            form.average_response_time * form.total_responses + time_taken_seconds
        ) / count
        form.total_responses = count
        await db.flush()
        return form

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, db: AsyncSession, form: FormDocument) -> None:
        await db.delete(form)
        await db.flush()


class ResponseRepository:
    """Async read/write operations on the ``form_responses`` table."""

    async def create(
        self,
        db: AsyncSession,
        *,
        form_id: uuid.UUID,
        responder_id: str | None,
        answers: list[dict[str, Any]],
        time_taken_seconds: int = 0,
    ) -> FormResponse:
        response = FormResponse(
            form_id=form_id,
            responder_id=responder_id,
            answers=answers,
            time_taken_seconds=time_taken_seconds,
        )
        db.add(response)
        await db.flush()
        return response

    async def get_by_id(self, db: AsyncSession, response_id: uuid.UUID) -> FormResponse | None:
        return await db.get(FormResponse, response_id)

    async def list_by_form(
        self,
        db: AsyncSession,
        form_id: uuid.UUID,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[FormResponse]:
        """List responses to a form, newest first."""
        stmt = (
            select(FormResponse)
            .where(FormResponse.form_id == form_id)
            .order_by(FormResponse.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_form(self, db: AsyncSession, form_id: uuid.UUID) -> int:
        """Delete every response to a form; returns the number removed."""
        stmt = delete(FormResponse).where(FormResponse.form_id == form_id)
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0
