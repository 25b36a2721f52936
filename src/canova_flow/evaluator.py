"""ConditionEvaluator — picks the branch target of a page at fill time.

A page's :class:`ConditionalLogic` holds a list of conditions that are
AND-ed together.  Each condition compares the answer to one question with
an ``answer_criteria`` string:

  - **empty criteria** (wildcard): satisfied by any non-empty answer
  - **list answer** (multi-select): satisfied if any selected value equals
    the criteria
  - **scalar answer**: satisfied if its string form equals the criteria

If every condition holds the true page is returned, otherwise the false
page.  Evaluation is pure: the answers mapping is only read.
"""

from __future__ import annotations

from typing import Any, Mapping

from canova_flow.models.form import ConditionalLogic, ConditionItem


def answer_value(answers: Mapping[str, Any], question_id: str) -> Any:
    """Return the raw answer for *question_id*.

    Accepts both plain values and answer records of the form
    ``{"value": ..., ...}`` as kept by the filling page.
    """
    answer = answers.get(question_id)
    if isinstance(answer, Mapping):
        return answer.get("value")
    return answer


def is_empty_answer(value: Any) -> bool:
    """True for answers that count as "not answered"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def stringify(value: Any) -> str:
    """String form of an answer value as the browser runtime produces it.

    Booleans become ``"true"``/``"false"`` and integral floats lose their
    trailing ``.0`` so that ``5.0`` compares equal to the criteria ``"5"``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    return str(value)


class ConditionEvaluator:
    """Evaluates branch rules against the answers collected so far."""

    def evaluate(
        self,
        logic: ConditionalLogic | None,
        answers: Mapping[str, Any],
    ) -> str | None:
        """Return the page id to route to, or ``None`` without a rule.

        Args:
            logic: the current page's branch rule (may be absent)
            answers: answers keyed by question id

        Returns:
            ``logic.true_page_id`` if all conditions hold, otherwise
            ``logic.false_page_id``; ``None`` if *logic* is ``None``.
        """
        if logic is None:
            return None
        if all(self.is_satisfied(cond, answers) for cond in logic.conditions):
            return logic.true_page_id
        return logic.false_page_id

    def is_satisfied(self, condition: ConditionItem, answers: Mapping[str, Any]) -> bool:
        """Evaluate a single condition.

        An unanswered question only satisfies nothing: the wildcard needs a
        non-empty answer and an explicit criteria never matches a missing
        value.
        """
        value = answer_value(answers, condition.question_id)
        criteria = condition.answer_criteria

        # Whitespace-only criteria is a wildcard; otherwise compared verbatim
        if not criteria.strip():
            return not is_empty_answer(value)
        if value is None:
            return False
        if isinstance(value, (list, tuple)):
            return any(stringify(v) == criteria for v in value)
        return stringify(value) == criteria
