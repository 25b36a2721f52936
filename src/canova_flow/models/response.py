"""Response models — answers submitted from the public filling page."""

from typing import Any, List

from pydantic import Field

from canova_flow.models.form import FormModel


class Answer(FormModel):
    """One answered question.

    ``value`` is a scalar for single-value questions and a list for
    multi-select (checkbox) questions.  Uploaded files are referenced by
    URL in ``file_urls``.
    """

    question_id: str
    question_type: str
    value: Any = None
    file_urls: List[str] = []


class ResponseSubmission(FormModel):
    """Body of a response submission."""

    answers: List[Answer] = Field(min_length=1)
    time_taken_seconds: int = Field(0, ge=0)


def answers_to_mapping(answers: list[Answer]) -> dict[str, Any]:
    """Flatten answer records into the ``question_id -> value`` mapping."""
    return {a.question_id: a.value for a in answers}
