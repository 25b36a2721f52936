"""FormNavigator — chooses the page to show next while a form is filled.

Selection order for the page after ``page``:

  1. If the page has a branch rule, evaluate it; if the chosen id is a page
     of the form, go there.
  2. Otherwise, if the builder gave the page successors, go to the first.
  3. Otherwise the page is terminal and the filler sees "Submit".

Going back never consults ``prev_page_id`` (a page may have several
predecessors); the caller keeps a history stack of visited page ids and
``back`` simply pops it.  The navigator never mutates the history or the
answers it is given.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from canova_flow.evaluator import ConditionEvaluator, answer_value, is_empty_answer
from canova_flow.models.flow import NavigationResult
from canova_flow.models.form import Page

logger = logging.getLogger(__name__)


def missing_required(page: Page, answers: Mapping[str, Any]) -> list[str]:
    """Ids of required questions on *page* that have no usable answer."""
    return [
        q.id
        for q in page.questions
        if q.is_required and is_empty_answer(answer_value(answers, q.id))
    ]


class FormNavigator:
    """Stateless page selection over the pages of one form."""

    def __init__(
        self,
        pages: Sequence[Page],
        evaluator: ConditionEvaluator | None = None,
    ) -> None:
        self._pages = list(pages)
        self._by_id = {p.id: p for p in self._pages}
        self._evaluator = evaluator or ConditionEvaluator()

    @property
    def first_page_id(self) -> str | None:
        return self._pages[0].id if self._pages else None

    def page(self, page_id: str) -> Page:
        """Return the page with *page_id*; raises ``ValueError`` if unknown."""
        try:
            return self._by_id[page_id]
        except KeyError:
            raise ValueError(f"Page not found: {page_id}") from None

    # ------------------------------------------------------------------
    # Forward selection
    # ------------------------------------------------------------------

    def next_page_id(self, page: Page, answers: Mapping[str, Any]) -> str | None:
        """Return the id of the page after *page*, or ``None`` if terminal."""
        if page.conditional_logic is not None:
            target = self._evaluator.evaluate(page.conditional_logic, answers)
            if target and target in self._by_id:
                return target
            if target:
                logger.debug("Branch target %s of page %s is not in the form", target, page.id)

        if page.next_page_id:
            nxt = page.next_page_id[0]
            return nxt if nxt in self._by_id else None
        return None

    def is_terminal(self, page: Page, answers: Mapping[str, Any]) -> bool:
        return self.next_page_id(page, answers) is None

    # ------------------------------------------------------------------
    # History-based actions
    # ------------------------------------------------------------------

    def start(self) -> NavigationResult:
        """Navigation state for a filler opening the form."""
        first = self.first_page_id
        if first is None:
            return NavigationResult(history=[], current_page_id=None, is_terminal=True)
        return self._result([first], {})

    def advance(self, history: Sequence[str], answers: Mapping[str, Any]) -> NavigationResult:
        """Handle "Next": validate the current page, then push the next page.

        If required questions on the current page are unanswered, or the
        current page is terminal, the history is returned unchanged.
        """
        history = self._normalise(history)
        current = self.page(history[-1])

        missing = missing_required(current, answers)
        if missing:
            return self._result(history, answers, missing=missing)

        nxt = self.next_page_id(current, answers)
        if nxt is not None:
            history = [*history, nxt]
        return self._result(history, answers)

    def back(self, history: Sequence[str], answers: Mapping[str, Any] | None = None) -> NavigationResult:
        """Handle "Previous": drop the current page from the history."""
        history = self._normalise(history)
        if len(history) > 1:
            history = history[:-1]
        return self._result(history, answers or {})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _normalise(self, history: Sequence[str]) -> list[str]:
        if not history:
            if self.first_page_id is None:
                raise ValueError("Form has no pages")
            return [self.first_page_id]
        for page_id in history:
            self.page(page_id)
        return list(history)

    def _result(
        self,
        history: list[str],
        answers: Mapping[str, Any],
        missing: list[str] | None = None,
    ) -> NavigationResult:
        current = self._by_id[history[-1]]
        return NavigationResult(
            history=history,
            current_page_id=current.id,
            is_terminal=self.is_terminal(current, answers),
            missing_required=missing or [],
        )
