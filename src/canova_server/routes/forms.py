"""Form editor endpoints — create, read, save, publish and delete forms.

``PUT /forms/{form_id}`` is the editor's save: the submitted pages are run
through the flow builder before storage and the build diagnostics come
back with the stored form.  ``POST /forms/{form_id}/flow`` builds without
saving, for the editor preview.
"""

from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from canova_flow.models.flow import BuildResult, Flowchart
from canova_flow.models.form import Page
from canova_flow.models.records import FormInfo, SaveResult
from canova_flow.render import FlowchartRenderer
from canova_flow.service import FormService

from canova_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["forms"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateFormRequest(BaseModel):
    """Body for POST /forms."""
    project_id: str
    title: str = Field(min_length=1, max_length=200)


class SaveFormRequest(BaseModel):
    """Body for PUT /forms/{form_id}.

    ``pages`` are camelCase page documents as the editor holds them; their
    ``nextPageId``/``prevPageId`` are recomputed on save.
    """
    pages: list[Page] = Field(min_length=1)
    title: str | None = Field(None, min_length=1, max_length=200)
    visibility: Literal["public", "private"] | None = None
    status: Literal["draft", "published"] | None = None


class BuildFlowRequest(BaseModel):
    """Body for POST /forms/{form_id}/flow."""
    pages: list[Page]


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/forms", status_code=201)
async def create_form(
    body: CreateFormRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> FormInfo:
    """Create a draft form in one of the caller's projects."""
    return await service.create_form(
        db, owner_id=user_id, project_id=body.project_id, title=body.title,
    )


@router.get("/forms/{form_id}")
async def get_form(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> FormInfo:
    return await service.get_form(db, owner_id=user_id, form_id=form_id)


@router.put("/forms/{form_id}")
async def save_form(
    form_id: str,
    body: SaveFormRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> SaveResult:
    """Build the page flow and store the form.

    Editing the pages of a published form deletes its responses and
    reverts it to draft; ``responses_deleted`` reports how many.
    """
    return await service.save_form(
        db,
        owner_id=user_id,
        form_id=form_id,
        pages=body.pages,
        title=body.title,
        visibility=body.visibility,
        status=body.status,
    )


@router.put("/forms/{form_id}/publish")
async def publish_form(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> FormInfo:
    return await service.publish_form(db, owner_id=user_id, form_id=form_id)


@router.delete("/forms/{form_id}", status_code=204)
async def delete_form(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> None:
    await service.delete_form(db, owner_id=user_id, form_id=form_id)


@router.post("/forms/{form_id}/flow")
async def build_form_flow(
    form_id: str,
    body: BuildFlowRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> BuildResult:
    """Build the flow of unsaved pages without storing anything."""
    return await service.preview_flow(
        db, owner_id=user_id, form_id=form_id, pages=body.pages,
    )


@router.get("/forms/{form_id}/flowchart")
async def get_flowchart(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> Flowchart:
    return await service.get_flowchart(db, owner_id=user_id, form_id=form_id)


@router.get("/forms/{form_id}/flowchart.mmd", response_class=PlainTextResponse)
async def get_flowchart_mermaid(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> str:
    """The stored form's flow as Mermaid source."""
    flowchart = await service.get_flowchart(db, owner_id=user_id, form_id=form_id)
    return FlowchartRenderer().render_mermaid(flowchart)
