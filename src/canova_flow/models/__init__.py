"""Public model re-exports for canova_flow.

Consumers should import from ``canova_flow.models`` rather than reaching
into sub-modules directly.
"""

# --- Form document ---
from canova_flow.models.form import (
    ConditionalLogic,
    ConditionItem,
    Form,
    OptionItem,
    Page,
    Question,
    QuestionType,
    Section,
    default_pages,
    dump_pages,
    generate_id,
)

# --- Engine results ---
from canova_flow.models.flow import (
    BuildResult,
    Edge,
    Flowchart,
    FlowchartEdge,
    FlowchartNode,
    NavigationResult,
)

# --- Service records ---
from canova_flow.models.records import (
    FlowDiagnostics,
    FormInfo,
    ProjectInfo,
    PublicForm,
    ResponseInfo,
    SaveResult,
)

# --- Responses ---
from canova_flow.models.response import (
    Answer,
    ResponseSubmission,
    answers_to_mapping,
)

__all__ = [
    # Form document
    "ConditionalLogic",
    "ConditionItem",
    "Form",
    "OptionItem",
    "Page",
    "Question",
    "QuestionType",
    "Section",
    "default_pages",
    "dump_pages",
    "generate_id",
    # Engine results
    "BuildResult",
    "Edge",
    "Flowchart",
    "FlowchartEdge",
    "FlowchartNode",
    "NavigationResult",
    # Service records
    "FlowDiagnostics",
    "FormInfo",
    "ProjectInfo",
    "PublicForm",
    "ResponseInfo",
    "SaveResult",
    # Responses
    "Answer",
    "ResponseSubmission",
    "answers_to_mapping",
]
