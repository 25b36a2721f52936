"""Project endpoints — create, list, open, rename and delete projects.

All endpoints require the ``X-User-ID`` header; a project is visible only
to its owner.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from canova_flow.models.records import FormInfo, ProjectInfo
from canova_flow.service import FormService

from canova_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from canova_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["projects"])


class ProjectNameRequest(BaseModel):
    """Body for POST /projects and PUT /projects/{project_id}."""
    name: str = Field(min_length=1, max_length=100)


@router.post("/projects", status_code=201)
async def create_project(
    body: ProjectNameRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> ProjectInfo:
    return await service.create_project(db, owner_id=user_id, name=body.name)


@router.get("/projects")
async def list_projects(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[ProjectInfo]:
    """List the caller's projects, most recent first."""
    return await service.list_projects(db, owner_id=user_id, limit=limit, offset=offset)


@router.get("/projects/{project_id}")
async def get_project(
    project_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> ProjectInfo:
    """Open a project (counts one project view)."""
    return await service.get_project(db, owner_id=user_id, project_id=project_id)


@router.put("/projects/{project_id}")
async def rename_project(
    project_id: str,
    body: ProjectNameRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> ProjectInfo:
    return await service.rename_project(
        db, owner_id=user_id, project_id=project_id, name=body.name,
    )


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> None:
    """Delete a project together with its forms and their responses."""
    await service.delete_project(db, owner_id=user_id, project_id=project_id)


@router.get("/projects/{project_id}/forms")
async def list_forms(
    project_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> list[FormInfo]:
    return await service.list_forms(db, owner_id=user_id, project_id=project_id)
