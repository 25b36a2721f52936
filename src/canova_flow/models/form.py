"""Form document models — pages, sections, questions and branch rules.

These mirror the shape of a form document as stored and as exchanged with
the editor and the public filling page.  Field names are snake_case in
Python; the camelCase wire names (``conditionalLogic``, ``nextPageId``,
``truePageId`` ...) are accepted on input and emitted by
``model_dump(by_alias=True)``.

A page's ``next_page_id`` / ``prev_page_id`` are derived by
:func:`canova_flow.builder.build_flow` and should be treated as a cache:
they are recomputed from ``conditional_logic`` plus page order on every
build.
"""

from __future__ import annotations

import uuid
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from canova_flow.constants import DEFAULT_FIRST_PAGE_NAME, DEFAULT_SECTION_NAME


def generate_id(prefix: str = "") -> str:
    """Return a short random id such as ``page-3f9a1c2``."""
    return f"{prefix}-{uuid.uuid4().hex[:7]}"


class FormModel(BaseModel):
    """Base for document models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Questions ---

QuestionType = Literal[
    "text",
    "shortAnswer",
    "longAnswer",
    "multipleChoice",
    "checkbox",
    "dropdown",
    "date",
    "linearScale",
    "rating",
    "fileUpload",
    "image",
    "video",
]


class OptionItem(FormModel):
    """An option stored as an object rather than a bare string."""

    id: Optional[str] = None
    text: str = ""


class Question(FormModel):
    """A single form field."""

    id: str = Field(default_factory=lambda: generate_id("q"))
    question_text: Optional[str] = None
    type: QuestionType
    # Plain strings or {id, text} objects; both shapes occur in stored forms
    options: List[Union[str, OptionItem]] = []
    media_url: Optional[str] = None
    placeholder: Optional[str] = None
    is_required: bool = False
    min_rating: int = Field(1, ge=0)
    max_rating: int = Field(5, ge=1)
    labels: List[str] = []

    @property
    def option_texts(self) -> list[str]:
        return [o if isinstance(o, str) else o.text for o in self.options]


class Section(FormModel):
    """A visual grouping of questions within a page."""

    id: str = Field(default_factory=lambda: generate_id("sec"))
    name: Optional[str] = None
    background_color: str = "#F0F0F0"
    questions: List[Question] = []


# --- Conditional logic ---

class ConditionItem(FormModel):
    """One criterion of a branch rule.

    ``answer_criteria`` is compared for equality against the answer to
    ``question_id`` exactly as written; an empty or whitespace-only
    criterion is a wildcard satisfied by any non-empty answer.
    """

    question_id: str
    answer_criteria: str = ""

    @field_validator("answer_criteria", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


class ConditionalLogic(FormModel):
    """Binary branch: all conditions met -> true page, otherwise false page."""

    conditions: List[ConditionItem] = []
    true_page_id: Optional[str] = None
    false_page_id: Optional[str] = None

    @property
    def targets(self) -> list[str]:
        """Non-empty branch targets in evaluation order (true, then false)."""
        return [t for t in (self.true_page_id, self.false_page_id) if t]


# --- Pages / form ---

class Page(FormModel):
    """A single step of a form."""

    id: str = Field(default_factory=lambda: generate_id("page"))
    name: str = "New Page"
    background_color: str = "#FFFFFF"
    sections: List[Section] = []
    conditional_logic: Optional[ConditionalLogic] = None
    # Derived by the flow builder
    next_page_id: List[str] = []
    prev_page_id: List[str] = []

    @field_validator("next_page_id", "prev_page_id", mode="before")
    @classmethod
    def _coerce_id_list(cls, v: Any) -> list:
        # Older documents stored a single id (or null) instead of a list
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v else []
        return v

    @property
    def questions(self) -> list[Question]:
        """All questions on the page, in section order."""
        return [q for section in self.sections for q in section.questions]

    @property
    def is_endpoint(self) -> bool:
        return not self.next_page_id


class Form(FormModel):
    """The editable part of a form document."""

    title: str = ""
    pages: List[Page] = []


def default_pages() -> list[Page]:
    """Pages for a freshly created form: one page with one empty section."""
    return [
        Page(
            id=generate_id("page"),
            name=DEFAULT_FIRST_PAGE_NAME,
            sections=[Section(id=generate_id("sec"), name=DEFAULT_SECTION_NAME)],
        )
    ]


def dump_pages(pages: list[Page]) -> list[dict]:
    """Serialise pages to the JSON-compatible document shape."""
    return [p.model_dump(by_alias=True, mode="json") for p in pages]
