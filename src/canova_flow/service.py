"""FormService — orchestrates projects, forms, the flow engine and responses.

The HTTP layer talks only to this class.  It owns the repositories and
wires the pure engine pieces (:func:`build_flow`, :class:`FormNavigator`,
media bookkeeping) to persistence:

    editor save ──► build_flow ──► store pages + derived graph
                                 └► diagnostics back to the editor
    public fill ──► FormNavigator (stateless, history supplied by caller)
    submit      ──► store answers ──► running analytics

Conventions:

  - Every method takes the ``AsyncSession`` first and never commits; the
    request dependency owns the transaction.
  - Missing rows and invalid states raise ``ValueError`` (the message
    contains "not found", "not publicly accessible", ...); owner checks
    raise ``PermissionError``.  The server maps both to status codes.

Usage::

    service = FormService(frontend_url="https://forms.example.com")
    project = await service.create_project(db, owner_id="u1", name="Research")
    form = await service.create_form(db, owner_id="u1", project_id=project.id,
                                     title="Intake survey")
    saved = await service.save_form(db, owner_id="u1", form_id=form.id,
                                    pages=edited_pages)
    saved.diagnostics.orphans   # pages no rule or order leads to
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from canova_db.models.enums import FormStatus, FormVisibility
from canova_db.models.form import FormDocument, Project
from canova_db.repository import FormRepository, ProjectRepository, ResponseRepository

from canova_flow.builder import build_flow
from canova_flow.constants import DEFAULT_PAGE_LIMIT, PUBLIC_FORM_PATH
from canova_flow.flowchart import build_flowchart
from canova_flow.interfaces import MediaStore
from canova_flow.media import delete_unused_media
from canova_flow.models.flow import BuildResult, Flowchart, NavigationResult
from canova_flow.models.form import Page, default_pages, dump_pages
from canova_flow.models.records import (
    FlowDiagnostics,
    FormInfo,
    ProjectInfo,
    PublicForm,
    ResponseInfo,
    SaveResult,
)
from canova_flow.models.response import ResponseSubmission, answers_to_mapping
from canova_flow.navigator import FormNavigator

logger = logging.getLogger(__name__)

NavigationDirection = Literal["start", "next", "back"]

_SAVED_MESSAGE = "Form updated successfully"
_RESPONSES_RESET_MESSAGE = (
    "Form updated successfully. All previous responses have been deleted "
    "due to form changes."
)


def _parse_id(value: str | uuid.UUID, kind: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValueError(f"Invalid {kind} ID: {value!r}") from None


def _load_pages(documents: list[dict[str, Any]]) -> list[Page]:
    return [Page.model_validate(doc) for doc in documents]


def _clean_name(name: str, kind: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError(f"{kind} name is required")
    return cleaned


class FormService:
    """Business operations behind the form builder and the filling page.

    Args:
        frontend_url: base URL of the web app; published links are
            ``{frontend_url}/forms/public/{form_id}``
        media_store: optional asset host used to delete media a form no
            longer references; if ``None``, media cleanup is skipped
    """

    def __init__(
        self,
        frontend_url: str = "",
        media_store: MediaStore | None = None,
    ) -> None:
        self._frontend_url = frontend_url.rstrip("/")
        self._media_store = media_store
        self._projects = ProjectRepository()
        self._forms = FormRepository()
        self._responses = ResponseRepository()

    # ==================================================================
    # Projects
    # ==================================================================

    async def create_project(
        self, db: AsyncSession, *, owner_id: str, name: str
    ) -> ProjectInfo:
        row = await self._projects.create(
            db, owner_id=owner_id, name=_clean_name(name, "Project")
        )
        logger.info("Created project %s for %s", row.id, owner_id)
        return ProjectInfo.from_row(row)

    async def list_projects(
        self,
        db: AsyncSession,
        *,
        owner_id: str,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> list[ProjectInfo]:
        """List the caller's projects, most recent first."""
        rows = await self._projects.list_by_owner(db, owner_id, limit=limit, offset=offset)
        return [ProjectInfo.from_row(r) for r in rows]

    async def get_project(
        self, db: AsyncSession, *, owner_id: str, project_id: str
    ) -> ProjectInfo:
        """Open a project.  Counts as one view of the project."""
        row = await self._require_project(db, owner_id, project_id)
        row = await self._projects.increment_views(db, row)
        return ProjectInfo.from_row(row)

    async def rename_project(
        self, db: AsyncSession, *, owner_id: str, project_id: str, name: str
    ) -> ProjectInfo:
        row = await self._require_project(db, owner_id, project_id)
        row = await self._projects.rename(db, row, _clean_name(name, "Project"))
        return ProjectInfo.from_row(row)

    async def delete_project(
        self, db: AsyncSession, *, owner_id: str, project_id: str
    ) -> None:
        """Delete a project, its forms and their responses.

        Forms and responses go with the project through ``ON DELETE
        CASCADE``; media of every form is released first.
        """
        row = await self._require_project(db, owner_id, project_id)
        forms = await self._forms.list_by_project(db, row.id)
        for form in forms:
            await delete_unused_media(self._media_store, _load_pages(form.pages), [])
        await self._projects.delete(db, row)
        logger.info("Deleted project %s with %d form(s)", row.id, len(forms))

    # ==================================================================
    # Forms: editor side
    # ==================================================================

    async def create_form(
        self, db: AsyncSession, *, owner_id: str, project_id: str, title: str
    ) -> FormInfo:
        """Create a draft form with one page holding one empty section."""
        project = await self._require_project(db, owner_id, project_id)
        row = await self._forms.create(
            db,
            project_id=project.id,
            owner_id=owner_id,
            title=_clean_name(title, "Form"),
            pages=dump_pages(default_pages()),
        )
        logger.info("Created form %s in project %s", row.id, project.id)
        return FormInfo.from_row(row)

    async def get_form(self, db: AsyncSession, *, owner_id: str, form_id: str) -> FormInfo:
        row = await self._require_form(db, owner_id, form_id)
        return FormInfo.from_row(row)

    async def list_forms(
        self, db: AsyncSession, *, owner_id: str, project_id: str
    ) -> list[FormInfo]:
        project = await self._require_project(db, owner_id, project_id)
        rows = await self._forms.list_by_project(db, project.id)
        return [FormInfo.from_row(r) for r in rows]

    async def save_form(
        self,
        db: AsyncSession,
        *,
        owner_id: str,
        form_id: str,
        pages: list[Page],
        title: str | None = None,
        visibility: str | None = None,
        status: str | None = None,
    ) -> SaveResult:
        """Build the page flow, then store the form.

        The derived ``next_page_id``/``prev_page_id`` of the incoming pages
        are ignored and recomputed.  When a published form's pages change,
        its collected responses no longer match the questions: they are
        deleted, the response counters reset and the form reverts to draft,
        unless the same request asks for ``status="published"``.
        """
        row = await self._require_form(db, owner_id, form_id)
        if not pages:
            raise ValueError("A form needs at least one page")

        vis = FormVisibility(visibility) if visibility is not None else None
        new_status = FormStatus(status) if status is not None else None

        old_pages = _load_pages(row.pages)
        result = build_flow(pages)
        documents = dump_pages(result.pages)
        changed = documents != row.pages

        deleted = 0
        if changed and row.status == FormStatus.PUBLISHED:
            deleted = await self._responses.delete_by_form(db, row.id)
            row = await self._forms.revert_to_draft(db, row)
            logger.info(
                "Form %s changed after publishing; deleted %d response(s)", row.id, deleted
            )

        if new_status == FormStatus.PUBLISHED:
            row = await self._forms.publish(db, row, self._public_link(row.id))
            new_status = None

        row = await self._forms.save_document(
            db,
            row,
            title=_clean_name(title, "Form") if title is not None else None,
            pages=documents,
            visibility=vis,
            status=new_status,
        )
        await delete_unused_media(self._media_store, old_pages, result.pages)

        return SaveResult(
            form=FormInfo.from_row(row),
            diagnostics=FlowDiagnostics(
                orphans=result.orphans,
                conflicts=result.conflicts,
                missing_targets=result.missing_targets,
                unreachable=result.unreachable,
            ),
            responses_deleted=deleted,
            message=_RESPONSES_RESET_MESSAGE if deleted else _SAVED_MESSAGE,
        )

    async def preview_flow(
        self, db: AsyncSession, *, owner_id: str, form_id: str, pages: list[Page]
    ) -> BuildResult:
        """Build the flow of unsaved *pages* so the editor can show it."""
        await self._require_form(db, owner_id, form_id)
        return build_flow(pages)

    async def get_flowchart(
        self, db: AsyncSession, *, owner_id: str, form_id: str
    ) -> Flowchart:
        """Nodes and edges of the stored form's flow, for the diagram view."""
        row = await self._require_form(db, owner_id, form_id)
        return build_flowchart(_load_pages(row.pages))

    async def publish_form(self, db: AsyncSession, *, owner_id: str, form_id: str) -> FormInfo:
        row = await self._require_form(db, owner_id, form_id)
        row = await self._forms.publish(db, row, self._public_link(row.id))
        logger.info("Published form %s", row.id)
        return FormInfo.from_row(row)

    async def delete_form(self, db: AsyncSession, *, owner_id: str, form_id: str) -> None:
        """Delete a form together with its responses and hosted media."""
        row = await self._require_form(db, owner_id, form_id)
        await delete_unused_media(self._media_store, _load_pages(row.pages), [])
        deleted = await self._responses.delete_by_form(db, row.id)
        await self._forms.delete(db, row)
        logger.info("Deleted form %s and %d response(s)", row.id, deleted)

    # ==================================================================
    # Forms: filling side (no owner)
    # ==================================================================

    async def get_public_form(self, db: AsyncSession, *, form_id: str) -> PublicForm:
        """Serve a published public form to a filler and count the view."""
        row = await self._require_public_form(db, form_id)
        row = await self._forms.record_view(db, row, datetime.now(timezone.utc).date())
        return PublicForm.from_row(row)

    async def navigate(
        self,
        db: AsyncSession,
        *,
        form_id: str,
        history: list[str],
        answers: dict[str, Any],
        direction: NavigationDirection = "next",
    ) -> NavigationResult:
        """Resolve one Next/Back click for a filler.

        The filler's client keeps the visit history and the answers; this
        call is stateless and writes nothing.
        """
        row = await self._require_public_form(db, form_id)
        navigator = FormNavigator(_load_pages(row.pages))
        if direction == "start":
            return navigator.start()
        if direction == "back":
            return navigator.back(history, answers)
        if direction == "next":
            return navigator.advance(history, answers)
        raise ValueError(f"Invalid navigation direction: {direction}")

    # ==================================================================
    # Responses
    # ==================================================================

    async def submit_response(
        self,
        db: AsyncSession,
        *,
        form_id: str,
        submission: ResponseSubmission,
        responder_id: str | None = None,
    ) -> ResponseInfo:
        """Store a filler's answers and update the form's analytics."""
        row = await self._require_public_form(db, form_id)

        known = {q.id for page in _load_pages(row.pages) for q in page.questions}
        unknown = [qid for qid in answers_to_mapping(submission.answers) if qid not in known]
        if unknown:
            raise ValueError(f"Unknown question ID(s) in response: {', '.join(unknown)}")

        response = await self._responses.create(
            db,
            form_id=row.id,
            responder_id=responder_id,
            answers=[a.model_dump(by_alias=True, mode="json") for a in submission.answers],
            time_taken_seconds=submission.time_taken_seconds,
        )
        await self._forms.record_response(db, row, submission.time_taken_seconds)
        return ResponseInfo.from_row(response)

    async def list_responses(
        self,
        db: AsyncSession,
        *,
        owner_id: str,
        form_id: str,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> list[ResponseInfo]:
        """List responses to one of the caller's forms, newest first."""
        row = await self._require_form(db, owner_id, form_id)
        rows = await self._responses.list_by_form(db, row.id, limit=limit, offset=offset)
        return [ResponseInfo.from_row(r) for r in rows]

    async def get_response(
        self, db: AsyncSession, *, owner_id: str, response_id: str
    ) -> ResponseInfo:
        response = await self._responses.get_by_id(db, _parse_id(response_id, "response"))
        if response is None:
            raise ValueError(f"Response not found: {response_id}")
        await self._require_form(db, owner_id, response.form_id)
        return ResponseInfo.from_row(response)

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _public_link(self, form_id: uuid.UUID) -> str:
        return f"{self._frontend_url}{PUBLIC_FORM_PATH}/{form_id}"

    async def _require_project(
        self, db: AsyncSession, owner_id: str, project_id: str | uuid.UUID
    ) -> Project:
        row = await self._projects.get_by_id(db, _parse_id(project_id, "project"))
        if row is None:
            raise ValueError(f"Project not found: {project_id}")
        if row.owner_id != owner_id:
            raise PermissionError(f"User {owner_id} does not own project {project_id}")
        return row

    async def _require_form(
        self, db: AsyncSession, owner_id: str, form_id: str | uuid.UUID
    ) -> FormDocument:
        row = await self._forms.get_by_id(db, _parse_id(form_id, "form"))
        if row is None:
            raise ValueError(f"Form not found: {form_id}")
        if row.owner_id != owner_id:
            raise PermissionError(f"User {owner_id} does not own form {form_id}")
        return row

    async def _require_public_form(
        self, db: AsyncSession, form_id: str | uuid.UUID
    ) -> FormDocument:
        row = await self._forms.get_by_id(db, _parse_id(form_id, "form"))
        if row is None:
            raise ValueError(f"Form not found: {form_id}")
        if row.status != FormStatus.PUBLISHED or row.visibility != FormVisibility.PUBLIC:
            raise ValueError(f"Form {form_id} is not publicly accessible")
        return row
