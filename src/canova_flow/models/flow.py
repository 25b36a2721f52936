"""Result models for the flow engine and the flowchart export.

``BuildResult`` carries the rebuilt pages together with the diagnostics the
builder collects along the way, so callers (the editor, the CLI, tests) can
inspect orphans and dropped claims instead of reading them from a log.
"""

from typing import Literal

from pydantic import BaseModel

from canova_flow.models.form import Page


class Edge(BaseModel):
    """A directed page-to-page reference."""

    source: str
    target: str


class BuildResult(BaseModel):
    """Output of :func:`canova_flow.builder.build_flow`.

    - pages: deep copies of the input pages with derived next/prev ids
    - orphans: pages (other than the first) never claimed as a successor
    - conflicts: branch edges dropped because the target was already claimed
    - missing_targets: branch edges whose target id is not a page of the form
    - unreachable: pages not reachable from the first page via next_page_id
    """

    pages: list[Page]
    orphans: list[str] = []
    conflicts: list[Edge] = []
    missing_targets: list[Edge] = []
    unreachable: list[str] = []

    @property
    def has_warnings(self) -> bool:
        return bool(self.orphans or self.conflicts or self.missing_targets or self.unreachable)

    def summary(self) -> list[dict]:
        """Per-page flow summary, as logged after every build."""
        return [
            {
                "id": p.id,
                "name": p.name,
                "next_pages": list(p.next_page_id),
                "has_conditional": p.conditional_logic is not None,
                "is_endpoint": p.is_endpoint,
            }
            for p in self.pages
        ]


class NavigationResult(BaseModel):
    """Outcome of a single Next/Back action on the filling page.

    ``history`` is the caller's visit stack after the action; its last
    entry is the page to display.  When ``missing_required`` is non-empty
    the action was refused and the history is unchanged.
    """

    history: list[str]
    current_page_id: str | None
    is_terminal: bool
    missing_required: list[str] = []


# --- Flowchart export ---

class FlowchartNode(BaseModel):
    id: str
    label: str
    has_conditional: bool = False


class FlowchartEdge(BaseModel):
    id: str
    source: str
    target: str
    kind: Literal["true", "false", "next"]


class Flowchart(BaseModel):
    nodes: list[FlowchartNode]
    edges: list[FlowchartEdge]
