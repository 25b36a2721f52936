from __future__ import annotations

from typing import List

from canova_flow.models.flow import Flowchart, FlowchartEdge, FlowchartNode
from canova_flow.models.form import Page


def build_flowchart(pages: List[Page]) -> Flowchart:
    """Node/edge data for the editor's flowchart view.

    Branch targets become ``true``/``false`` edges; derived successors that
    a branch does not already cover become plain ``next`` edges.  Targets
    that are not pages of the form are skipped.  Layout is left to the
    client.
    """
    valid_ids = {p.id for p in pages if p.id}
    nodes: List[FlowchartNode] = []
    edges: List[FlowchartEdge] = []

    for page in pages:
        if not page.id:
            continue
        nodes.append(
            FlowchartNode(
                id=page.id,
                label=page.name or page.id,
                has_conditional=page.conditional_logic is not None,
            )
        )

        cond = page.conditional_logic
        branch_targets = set()
        if cond is not None:
            for kind, target in (("true", cond.true_page_id), ("false", cond.false_page_id)):
                if target and target in valid_ids:
                    branch_targets.add(target)
                    edges.append(
                        FlowchartEdge(
                            id=f"{page.id}-{kind}->{target}",
                            source=page.id,
                            target=target,
                            kind=kind,
                        )
                    )

        for target in page.next_page_id:
            if target in valid_ids and target not in branch_targets:
                edges.append(
                    FlowchartEdge(
                        id=f"{page.id}->{target}",
                        source=page.id,
                        target=target,
                        kind="next",
                    )
                )

    return Flowchart(nodes=nodes, edges=edges)
