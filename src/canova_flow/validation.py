"""Optional strict checks on a form's branch rules.

The builder tolerates every authoring mistake.  Editors that want to warn
authors up front can run :func:`find_condition_issues` before saving; it
reports problems without changing anything and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from canova_flow.models.form import Page

IssueKind = Literal[
    "duplicate_page_id",
    "unknown_question",
    "later_question",
    "missing_target",
    "self_target",
]


@dataclass(frozen=True)
class ConditionIssue:
    """One problem found on a page's branch rule."""

    page_id: str
    kind: IssueKind
    detail: str


def find_condition_issues(pages: list[Page]) -> list[ConditionIssue]:
    """Return the branch-rule problems of *pages*, in page order."""
    issues: list[ConditionIssue] = []
    page_ids = [p.id for p in pages]
    known_pages = set(page_ids)

    seen: set[str] = set()
    for page_id in page_ids:
        if page_id in seen:
            issues.append(ConditionIssue(page_id, "duplicate_page_id", f"page id {page_id!r} is used more than once"))
        seen.add(page_id)

    # question id -> index of the page it lives on
    question_page: dict[str, int] = {}
    for index, page in enumerate(pages):
        for question in page.questions:
            question_page.setdefault(question.id, index)

    for index, page in enumerate(pages):
        logic = page.conditional_logic
        if logic is None:
            continue

        for cond in logic.conditions:
            where = question_page.get(cond.question_id)
            if where is None:
                issues.append(
                    ConditionIssue(page.id, "unknown_question", f"condition references unknown question {cond.question_id!r}")
                )
            elif where > index:
                issues.append(
                    ConditionIssue(
                        page.id,
                        "later_question",
                        f"condition references question {cond.question_id!r} on a later page",
                    )
                )

        for label, target in (("true", logic.true_page_id), ("false", logic.false_page_id)):
            if not target:
                continue
            if target == page.id:
                issues.append(ConditionIssue(page.id, "self_target", f"{label} branch points at its own page"))
            elif target not in known_pages:
                issues.append(ConditionIssue(page.id, "missing_target", f"{label} branch target {target!r} not found"))

    return issues
