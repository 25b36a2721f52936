"""Response endpoints — a form owner reads the responses collected."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from canova_flow.models.records import ResponseInfo
from canova_flow.service import FormService

from canova_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from canova_server.dependencies import get_db, get_service, get_user_id

router = APIRouter(tags=["responses"])


@router.get("/forms/{form_id}/responses")
async def list_responses(
    form_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[ResponseInfo]:
    """List responses to one of the caller's forms, newest first."""
    return await service.list_responses(
        db, owner_id=user_id, form_id=form_id, limit=limit, offset=offset,
    )


@router.get("/responses/{response_id}")
async def get_response(
    response_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> ResponseInfo:
    return await service.get_response(db, owner_id=user_id, response_id=response_id)
