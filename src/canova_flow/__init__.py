"""canova_flow — form flow SDK for the Canova form builder.

Public API:
    build_flow         — derive next/prev page links from branch rules
    ConditionEvaluator — evaluate a page's branch rule against answers
    FormNavigator      — choose the next/previous page while filling a form
    FormService        — orchestrator for projects, forms and responses
    build_flowchart    — nodes and edges for the flow diagram view
    find_condition_issues — stricter author-time checks of branch rules

Models:
    Form, Page, Section, Question, ConditionalLogic, ConditionItem
    BuildResult       — rebuilt pages plus orphan/conflict diagnostics
    NavigationResult  — outcome of one Next/Back action
    Flowchart         — diagram nodes and typed edges
    ResponseSubmission, Answer — a filler's submitted answers

Collaborators:
    MediaStore        — ABC for the asset host holding uploaded media
"""

from canova_flow.builder import build_flow
from canova_flow.evaluator import ConditionEvaluator
from canova_flow.flowchart import build_flowchart
from canova_flow.interfaces import MediaStore
from canova_flow.models import (
    Answer,
    BuildResult,
    ConditionalLogic,
    ConditionItem,
    Flowchart,
    Form,
    NavigationResult,
    Page,
    Question,
    ResponseSubmission,
    Section,
)
from canova_flow.navigator import FormNavigator
from canova_flow.service import FormService
from canova_flow.validation import ConditionIssue, find_condition_issues

__all__ = [
    # Engine
    "build_flow",
    "build_flowchart",
    "ConditionEvaluator",
    "FormNavigator",
    "FormService",
    "find_condition_issues",
    "ConditionIssue",
    # Collaborators
    "MediaStore",
    # Models
    "Answer",
    "BuildResult",
    "ConditionalLogic",
    "ConditionItem",
    "Flowchart",
    "Form",
    "NavigationResult",
    "Page",
    "Question",
    "ResponseSubmission",
    "Section",
]
