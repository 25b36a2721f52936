"""Public filling endpoints — no ``X-User-ID`` required.

Only published forms with public visibility are served; anything else is
answered with 403.  Navigation is stateless: the filler's client sends its
visit history and current answers with every Next/Back click.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from canova_flow.models.flow import NavigationResult
from canova_flow.models.records import PublicForm, ResponseInfo
from canova_flow.models.response import ResponseSubmission
from canova_flow.service import FormService

from canova_server.dependencies import get_db, get_optional_user_id, get_service

router = APIRouter(prefix="/public", tags=["public"])


class NavigateRequest(BaseModel):
    """Body for POST /public/forms/{form_id}/navigate."""
    direction: Literal["start", "next", "back"] = "next"
    history: list[str] = []
    # question id -> answer value
    answers: dict[str, Any] = {}


@router.get("/forms/{form_id}")
async def get_public_form(
    form_id: str,
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> PublicForm:
    """Serve a form to a filler (counts one view)."""
    return await service.get_public_form(db, form_id=form_id)


@router.post("/forms/{form_id}/navigate")
async def navigate(
    form_id: str,
    body: NavigateRequest,
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> NavigationResult:
    """Resolve the page to show after a Next/Back click.

    When ``missing_required`` is non-empty the click was refused and the
    returned history is unchanged.
    """
    return await service.navigate(
        db,
        form_id=form_id,
        history=body.history,
        answers=body.answers,
        direction=body.direction,
    )


@router.post("/forms/{form_id}/responses", status_code=201)
async def submit_response(
    form_id: str,
    body: ResponseSubmission,
    responder_id: str | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
    service: FormService = Depends(get_service),
) -> ResponseInfo:
    return await service.submit_response(
        db, form_id=form_id, submission=body, responder_id=responder_id,
    )
