"""FormService tests with a mocked DB layer.

Uses MockProjectRow/MockFormRow/MockResponseRow (plain dataclasses mimicking
the ORM models) and in-memory repositories implementing the methods the
service calls, so the orchestration is tested without a real database.

Mock strategy:
  - Rows have the same attributes as the ORM models but no SQLAlchemy
    dependency.  The service reads/writes attributes directly.
  - The three mock repositories share one MockDatabase so deleting a
    project cascades the way ``ON DELETE CASCADE`` does.
  - The ``mock_db`` fixture (an AsyncMock) stands in for AsyncSession.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

import pytest

from canova_db.models.enums import FormStatus, FormVisibility
from canova_flow.interfaces import MediaStore
from canova_flow.models.response import ResponseSubmission
from canova_flow.service import FormService

from helpers.factories import logic, page, question

OWNER = "user-1"
STRANGER = "user-2"
IMG = "https://res.cloudinary.com/demo/image/upload/v1/form-media/images/cat.jpg"


def _now():
    return datetime.now(timezone.utc)


# =====================================================================
# Mock infrastructure
# =====================================================================


@dataclass
class MockProjectRow:
    owner_id: str
    name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    total_views: int = 0
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockFormRow:
    project_id: uuid.UUID
    owner_id: str
    title: str
    pages: list
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    status: str = FormStatus.DRAFT
    visibility: str = FormVisibility.PUBLIC
    published_link: str | None = None
    total_views: int = 0
    total_responses: int = 0
    average_response_time: float = 0.0
    daily_views: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class MockResponseRow:
    form_id: uuid.UUID
    responder_id: str | None
    answers: list
    time_taken_seconds: int = 0
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)


class MockDatabase:
    def __init__(self):
        self.projects: dict[uuid.UUID, MockProjectRow] = {}
        self.forms: dict[uuid.UUID, MockFormRow] = {}
        self.responses: dict[uuid.UUID, MockResponseRow] = {}


class MockProjectRepository:
    def __init__(self, data: MockDatabase):
        self._data = data

    async def create(self, db, *, owner_id, name):
        row = MockProjectRow(owner_id=owner_id, name=name)
        self._data.projects[row.id] = row
        return row

    async def get_by_id(self, db, project_id):
        return self._data.projects.get(project_id)

    async def list_by_owner(self, db, owner_id, *, limit=20, offset=0):
        rows = [p for p in self._data.projects.values() if p.owner_id == owner_id]
        rows.sort(key=lambda p: p.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def rename(self, db, project, name):
        project.name = name
        project.updated_at = _now()
        return project

    async def increment_views(self, db, project):
        project.total_views += 1
        return project

    async def delete(self, db, project):
        # ON DELETE CASCADE
        form_ids = {f.id for f in self._data.forms.values() if f.project_id == project.id}
        for fid in form_ids:
            del self._data.forms[fid]
        for rid in [r.id for r in self._data.responses.values() if r.form_id in form_ids]:
            del self._data.responses[rid]
        del self._data.projects[project.id]


class MockFormRepository:
    def __init__(self, data: MockDatabase):
        self._data = data

    async def create(self, db, *, project_id, owner_id, title, pages):
        row = MockFormRow(project_id=project_id, owner_id=owner_id, title=title, pages=pages)
        self._data.forms[row.id] = row
        return row

    async def get_by_id(self, db, form_id):
        return self._data.forms.get(form_id)

    async def list_by_project(self, db, project_id):
        return [f for f in self._data.forms.values() if f.project_id == project_id]

    async def save_document(self, db, form, *, title=None, pages=None, visibility=None, status=None):
        if title is not None:
            form.title = title
        if pages is not None:
            form.pages = pages
        if visibility is not None:
            form.visibility = visibility
        if status is not None:
            form.status = status
        form.updated_at = _now()
        return form

    async def publish(self, db, form, link):
        form.status = FormStatus.PUBLISHED
        form.published_link = link
        return form

    async def revert_to_draft(self, db, form):
        form.status = FormStatus.DRAFT
        form.total_responses = 0
        form.average_response_time = 0.0
        return form

    async def record_view(self, db, form, day: date):
        key = day.isoformat()
        form.daily_views = {**form.daily_views, key: form.daily_views.get(key, 0) + 1}
        form.total_views += 1
        return form

    async def record_response(self, db, form, time_taken_seconds):
        count = form.total_responses + 1
        form.average_response_time = (
            form.average_response_time * form.total_responses + time_taken_seconds
        ) / count
        form.total_responses = count
        return form

    async def delete(self, db, form):
        del self._data.forms[form.id]


class MockResponseRepository:
    def __init__(self, data: MockDatabase):
        self._data = data

    async def create(self, db, *, form_id, responder_id, answers, time_taken_seconds=0):
        row = MockResponseRow(
            form_id=form_id,
            responder_id=responder_id,
            answers=answers,
            time_taken_seconds=time_taken_seconds,
        )
        self._data.responses[row.id] = row
        return row

    async def get_by_id(self, db, response_id):
        return self._data.responses.get(response_id)

    async def list_by_form(self, db, form_id, *, limit=20, offset=0):
        rows = [r for r in self._data.responses.values() if r.form_id == form_id]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def delete_by_form(self, db, form_id):
        ids = [r.id for r in self._data.responses.values() if r.form_id == form_id]
        for rid in ids:
            del self._data.responses[rid]
        return len(ids)


class RecordingMediaStore(MediaStore):
    def __init__(self):
        self.deleted: list[tuple[str, str]] = []

    async def delete(self, public_id, resource_type):
        self.deleted.append((public_id, resource_type))


def make_service(data: MockDatabase, media_store: MediaStore | None = None) -> FormService:
    """FormService wired to in-memory repositories."""
    service = FormService(frontend_url="https://forms.example.com/", media_store=media_store)
    service._projects = MockProjectRepository(data)
    service._forms = MockFormRepository(data)
    service._responses = MockResponseRepository(data)
    return service


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def data():
    return MockDatabase()


@pytest.fixture
def media():
    return RecordingMediaStore()


@pytest.fixture
def service(data, media):
    return make_service(data, media)


def _branching_pages():
    return [
        page("A", question("q0", is_required=True)),
        page("B", question("q1", "multipleChoice", options=["yes", "no"]),
             branch=logic("D", "C", ("q1", "yes"))),
        page("C", question("q2")),
        page("D", question("img", "image", media_url=IMG)),
    ]


async def _published_form(service, mock_db):
    project = await service.create_project(mock_db, owner_id=OWNER, name="P")
    form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
    await service.save_form(mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages())
    return await service.publish_form(mock_db, owner_id=OWNER, form_id=form.id)


def _submission(**answers: Any) -> ResponseSubmission:
    return ResponseSubmission.model_validate(
        {
            "answers": [
                {"questionId": qid, "questionType": "text", "value": value}
                for qid, value in answers.items()
            ],
            "timeTakenSeconds": 30,
        }
    )


# =====================================================================
# Projects
# =====================================================================


class TestProjects:
    @pytest.mark.asyncio
    async def test_create_and_list(self, service, mock_db):
        await service.create_project(mock_db, owner_id=OWNER, name="  Research ")
        await service.create_project(mock_db, owner_id=STRANGER, name="Other")

        projects = await service.list_projects(mock_db, owner_id=OWNER)
        assert [p.name for p in projects] == ["Research"]

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, service, mock_db):
        with pytest.raises(ValueError, match="name is required"):
            await service.create_project(mock_db, owner_id=OWNER, name="  ")

    @pytest.mark.asyncio
    async def test_get_counts_views(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        await service.get_project(mock_db, owner_id=OWNER, project_id=project.id)
        info = await service.get_project(mock_db, owner_id=OWNER, project_id=project.id)
        assert info.total_views == 2

    @pytest.mark.asyncio
    async def test_owner_only(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        with pytest.raises(PermissionError):
            await service.rename_project(
                mock_db, owner_id=STRANGER, project_id=project.id, name="Mine"
            )

    @pytest.mark.asyncio
    async def test_not_found_and_invalid_id(self, service, mock_db):
        with pytest.raises(ValueError, match="not found"):
            await service.get_project(mock_db, owner_id=OWNER, project_id=str(uuid.uuid4()))
        with pytest.raises(ValueError, match="Invalid project ID"):
            await service.get_project(mock_db, owner_id=OWNER, project_id="abc")

    @pytest.mark.asyncio
    async def test_delete_cascades(self, service, data, media, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="x"))

        await service.delete_project(mock_db, owner_id=OWNER, project_id=form.project_id)

        assert data.projects == {} and data.forms == {} and data.responses == {}
        assert media.deleted == [("form-media/images/cat", "image")]


# =====================================================================
# Forms — editor
# =====================================================================


class TestForms:
    @pytest.mark.asyncio
    async def test_create_form_has_default_page(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")

        assert form.status == "draft"
        assert len(form.pages) == 1
        assert form.pages[0].name == "Page 01"
        assert form.pages[0].sections[0].name == "Default Section"

    @pytest.mark.asyncio
    async def test_create_form_in_foreign_project(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        with pytest.raises(PermissionError):
            await service.create_form(mock_db, owner_id=STRANGER, project_id=project.id, title="F")

    @pytest.mark.asyncio
    async def test_save_builds_flow(self, service, data, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")

        saved = await service.save_form(
            mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages(), title="Renamed",
        )

        assert saved.form.title == "Renamed"
        stored = data.forms[uuid.UUID(form.id)].pages
        assert [p["nextPageId"] for p in stored] == [["B"], ["D", "C"], [], []]
        assert saved.diagnostics.orphans == []
        assert saved.responses_deleted == 0

    @pytest.mark.asyncio
    async def test_save_reports_diagnostics(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")

        pages = [page("a", branch=logic("ghost", None)), page("b")]
        saved = await service.save_form(mock_db, owner_id=OWNER, form_id=form.id, pages=pages)

        assert [(e.source, e.target) for e in saved.diagnostics.missing_targets] == [("a", "ghost")]

    @pytest.mark.asyncio
    async def test_save_without_pages_rejected(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
        with pytest.raises(ValueError):
            await service.save_form(mock_db, owner_id=OWNER, form_id=form.id, pages=[])

    @pytest.mark.asyncio
    async def test_editing_published_form_resets_responses(self, service, data, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="x"))

        pages = _branching_pages()
        pages[2].name = "Changed"
        saved = await service.save_form(mock_db, owner_id=OWNER, form_id=form.id, pages=pages)

        assert saved.responses_deleted == 1
        assert "deleted" in saved.message
        assert saved.form.status == "draft"
        assert saved.form.total_responses == 0
        assert data.responses == {}

    @pytest.mark.asyncio
    async def test_editing_published_form_with_publish_status(self, service, data, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="x"))

        pages = _branching_pages()
        pages[2].name = "Changed"
        saved = await service.save_form(
            mock_db, owner_id=OWNER, form_id=form.id, pages=pages, status="published",
        )

        assert saved.responses_deleted == 1
        assert saved.form.status == "published"
        assert saved.form.published_link.endswith(f"/forms/public/{form.id}")
        assert saved.form.total_responses == 0
        assert data.responses == {}

    @pytest.mark.asyncio
    async def test_unchanged_published_form_keeps_responses(self, service, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="x"))

        saved = await service.save_form(
            mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages(), visibility="private",
        )

        assert saved.responses_deleted == 0
        assert saved.form.status == "published"
        assert saved.form.visibility == "private"

    @pytest.mark.asyncio
    async def test_save_deletes_unused_media(self, service, media, mock_db):
        form = await _published_form(service, mock_db)
        pages = _branching_pages()
        pages[3].sections[0].questions = []

        await service.save_form(mock_db, owner_id=OWNER, form_id=form.id, pages=pages)
        assert media.deleted == [("form-media/images/cat", "image")]

    @pytest.mark.asyncio
    async def test_save_with_publish_status_sets_link(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
        saved = await service.save_form(
            mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages(), status="published",
        )
        assert saved.form.status == "published"
        assert saved.form.published_link.endswith(f"/forms/public/{form.id}")

    @pytest.mark.asyncio
    async def test_invalid_visibility(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
        with pytest.raises(ValueError):
            await service.save_form(
                mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages(), visibility="secret",
            )

    @pytest.mark.asyncio
    async def test_publish_link(self, service, mock_db):
        form = await _published_form(service, mock_db)
        assert form.status == "published"
        assert form.published_link == f"https://forms.example.com/forms/public/{form.id}"

    @pytest.mark.asyncio
    async def test_preview_and_flowchart(self, service, mock_db):
        form = await _published_form(service, mock_db)

        preview = await service.preview_flow(
            mock_db, owner_id=OWNER, form_id=form.id, pages=[page("x"), page("y")],
        )
        assert [p.next_page_id for p in preview.pages] == [["y"], []]

        chart = await service.get_flowchart(mock_db, owner_id=OWNER, form_id=form.id)
        assert {e.id for e in chart.edges} == {"A->B", "B-true->D", "B-false->C"}

    @pytest.mark.asyncio
    async def test_delete_form(self, service, data, media, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="x"))

        await service.delete_form(mock_db, owner_id=OWNER, form_id=form.id)

        assert data.forms == {} and data.responses == {}
        assert media.deleted == [("form-media/images/cat", "image")]

    @pytest.mark.asyncio
    async def test_works_without_media_store(self, data, mock_db):
        service = make_service(data)
        form = await _published_form(service, mock_db)
        await service.delete_form(mock_db, owner_id=OWNER, form_id=form.id)
        assert data.forms == {}


# =====================================================================
# Filling side
# =====================================================================


class TestPublic:
    @pytest.mark.asyncio
    async def test_draft_not_public(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
        with pytest.raises(ValueError, match="not publicly accessible"):
            await service.get_public_form(mock_db, form_id=form.id)

    @pytest.mark.asyncio
    async def test_private_not_public(self, service, mock_db):
        form = await _published_form(service, mock_db)
        await service.save_form(
            mock_db, owner_id=OWNER, form_id=form.id, pages=_branching_pages(), visibility="private",
        )
        with pytest.raises(ValueError, match="not publicly accessible"):
            await service.get_public_form(mock_db, form_id=form.id)

    @pytest.mark.asyncio
    async def test_views_counted(self, service, mock_db):
        form = await _published_form(service, mock_db)
        public = await service.get_public_form(mock_db, form_id=form.id)
        await service.get_public_form(mock_db, form_id=form.id)

        assert public.title == "F"
        info = await service.get_form(mock_db, owner_id=OWNER, form_id=form.id)
        assert info.total_views == 2
        today = datetime.now(timezone.utc).date().isoformat()
        assert info.daily_views == {today: 2}

    @pytest.mark.asyncio
    async def test_navigate(self, service, mock_db):
        form = await _published_form(service, mock_db)

        start = await service.navigate(mock_db, form_id=form.id, history=[], answers={}, direction="start")
        assert start.history == ["A"]

        blocked = await service.navigate(mock_db, form_id=form.id, history=["A"], answers={})
        assert blocked.missing_required == ["q0"]

        answers = {"q0": "hi", "q1": "no"}
        step = await service.navigate(mock_db, form_id=form.id, history=["A"], answers=answers)
        step = await service.navigate(mock_db, form_id=form.id, history=step.history, answers=answers)
        assert step.history == ["A", "B", "C"]
        assert step.is_terminal

        back = await service.navigate(
            mock_db, form_id=form.id, history=step.history, answers=answers, direction="back",
        )
        assert back.current_page_id == "B"

    @pytest.mark.asyncio
    async def test_navigate_bad_direction(self, service, mock_db):
        form = await _published_form(service, mock_db)
        with pytest.raises(ValueError, match="direction"):
            await service.navigate(mock_db, form_id=form.id, history=[], answers={}, direction="up")


# =====================================================================
# Responses
# =====================================================================


class TestResponses:
    @pytest.mark.asyncio
    async def test_submit_updates_analytics(self, service, mock_db):
        form = await _published_form(service, mock_db)
        await service.submit_response(mock_db, form_id=form.id, submission=_submission(q0="a"))
        second = _submission(q0="b", q1="yes")
        second.time_taken_seconds = 60
        await service.submit_response(mock_db, form_id=form.id, submission=second, responder_id="r1")

        info = await service.get_form(mock_db, owner_id=OWNER, form_id=form.id)
        assert info.total_responses == 2
        assert info.average_response_time == pytest.approx(45.0)

        responses = await service.list_responses(mock_db, owner_id=OWNER, form_id=form.id)
        assert len(responses) == 2
        assert {r.responder_id for r in responses} == {None, "r1"}

    @pytest.mark.asyncio
    async def test_unknown_question_rejected(self, service, mock_db):
        form = await _published_form(service, mock_db)
        with pytest.raises(ValueError, match="Unknown question"):
            await service.submit_response(mock_db, form_id=form.id, submission=_submission(zz="x"))

    @pytest.mark.asyncio
    async def test_submit_to_draft_rejected(self, service, mock_db):
        project = await service.create_project(mock_db, owner_id=OWNER, name="P")
        form = await service.create_form(mock_db, owner_id=OWNER, project_id=project.id, title="F")
        with pytest.raises(ValueError, match="not publicly accessible"):
            await service.submit_response(mock_db, form_id=form.id, submission=_submission(q="x"))

    @pytest.mark.asyncio
    async def test_get_response_owner_only(self, service, mock_db):
        form = await _published_form(service, mock_db)
        created = await service.submit_response(
            mock_db, form_id=form.id, submission=_submission(q0="x"),
        )

        fetched = await service.get_response(mock_db, owner_id=OWNER, response_id=created.id)
        assert fetched.answers[0].value == "x"
        with pytest.raises(PermissionError):
            await service.get_response(mock_db, owner_id=STRANGER, response_id=created.id)
        with pytest.raises(ValueError, match="not found"):
            await service.get_response(mock_db, owner_id=OWNER, response_id=str(uuid.uuid4()))
