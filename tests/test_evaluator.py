"""ConditionEvaluator unit tests — AND semantics, wildcard and list answers.

Each rule has at least one positive and one negative case.

Matching reference (from ConditionEvaluator.is_satisfied):
    ""        — wildcard, any non-empty answer
    list      — any selected value equals the criteria
    scalar    — string form equals the criteria ("5" == 5 == 5.0)
"""

import pytest

from canova_flow.evaluator import (
    ConditionEvaluator,
    answer_value,
    is_empty_answer,
    stringify,
)
from canova_flow.models.form import ConditionItem

from helpers.factories import logic


@pytest.fixture
def evaluator():
    return ConditionEvaluator()


def _cond(qid, criteria):
    return ConditionItem(question_id=qid, answer_criteria=criteria)


# =====================================================================
# evaluate — branch selection
# =====================================================================


class TestEvaluate:
    def test_no_rule(self, evaluator):
        assert evaluator.evaluate(None, {"q1": "x"}) is None

    def test_all_conditions_met(self, evaluator):
        rule = logic("T", "F", ("q1", "red"), ("q2", "5"))
        assert evaluator.evaluate(rule, {"q1": "red", "q2": "5"}) == "T"

    @pytest.mark.parametrize(
        "answers",
        [
            {"q1": "blue", "q2": "5"},
            {"q1": "red", "q2": "6"},
            {"q1": "red"},
            {},
        ],
    )
    def test_any_mismatch_selects_false(self, evaluator, answers):
        rule = logic("T", "F", ("q1", "red"), ("q2", "5"))
        assert evaluator.evaluate(rule, answers) == "F"

    def test_empty_condition_list_selects_true(self, evaluator):
        assert evaluator.evaluate(logic("T", "F"), {}) == "T"

    def test_false_target_may_be_absent(self, evaluator):
        rule = logic("T", None, ("q1", "yes"))
        assert evaluator.evaluate(rule, {"q1": "no"}) is None

    def test_answers_not_mutated(self, evaluator):
        answers = {"q1": ["a", "b"]}
        evaluator.evaluate(logic("T", "F", ("q1", "a")), answers)
        assert answers == {"q1": ["a", "b"]}


# =====================================================================
# is_satisfied — single condition
# =====================================================================


class TestWildcard:
    def test_any_answer(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", ""), {"q1": "anything"})

    @pytest.mark.parametrize("answers", [{"q1": ""}, {}, {"q1": None}, {"q1": []}])
    def test_empty_answer(self, evaluator, answers):
        assert not evaluator.is_satisfied(_cond("q1", ""), answers)

    def test_whitespace_criteria_is_wildcard(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "   "), {"q1": "x"})

    def test_zero_counts_as_answered(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", ""), {"q1": 0})


class TestListAnswers:
    def test_contains(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "blue"), {"q1": ["red", "blue"]})

    def test_not_contains(self, evaluator):
        assert not evaluator.is_satisfied(_cond("q1", "blue"), {"q1": ["red"]})

    def test_numeric_items(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "3"), {"q1": [1, 3]})


class TestScalarAnswers:
    def test_equal(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "yes"), {"q1": "yes"})

    def test_case_sensitive(self, evaluator):
        assert not evaluator.is_satisfied(_cond("q1", "yes"), {"q1": "Yes"})

    def test_number_matches_string_criteria(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "5"), {"q1": 5})
        assert evaluator.is_satisfied(_cond("q1", "5"), {"q1": 5.0})

    def test_boolean(self, evaluator):
        assert evaluator.is_satisfied(_cond("q1", "true"), {"q1": True})
        assert not evaluator.is_satisfied(_cond("q1", "True"), {"q1": True})

    def test_criteria_compared_verbatim(self, evaluator):
        assert not evaluator.is_satisfied(_cond("q1", " yes "), {"q1": "yes"})
        assert evaluator.is_satisfied(_cond("q1", " yes "), {"q1": " yes "})

    def test_padded_criteria_picks_false_target(self, evaluator):
        rule = logic("t", "f", ("q1", " yes "))
        assert evaluator.evaluate(rule, {"q1": "yes"}) == "f"

    def test_missing_answer(self, evaluator):
        assert not evaluator.is_satisfied(_cond("q1", "yes"), {})

    def test_answer_record(self, evaluator):
        answers = {"q1": {"value": "yes", "questionType": "multipleChoice"}}
        assert evaluator.is_satisfied(_cond("q1", "yes"), answers)


# =====================================================================
# Helpers
# =====================================================================


def test_answer_value_unwraps_records():
    assert answer_value({"q": {"value": [1]}}, "q") == [1]
    assert answer_value({"q": "x"}, "q") == "x"
    assert answer_value({}, "q") is None


def test_is_empty_answer():
    assert is_empty_answer(None)
    assert is_empty_answer("")
    assert is_empty_answer([])
    assert not is_empty_answer(" ")
    assert not is_empty_answer(False)


def test_stringify():
    assert stringify(False) == "false"
    assert stringify(2.5) == "2.5"
    assert stringify(None) == ""
