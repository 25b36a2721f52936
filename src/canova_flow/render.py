"""FlowchartRenderer — Jinja2-based text renderer for flow diagrams.

Loads templates from the ``template/`` directory and renders a
:class:`Flowchart` as Mermaid source, so a form's flow can be pasted into
any Mermaid viewer or printed by ``canova-flow build --mermaid``.
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from canova_flow.models.flow import Flowchart

MERMAID_TEMPLATE = "flowchart.mmd.jinja2"

# Mermaid arrow per edge kind; branch edges carry their outcome as a label
_ARROWS: dict[str, str] = {
    "true": '-- "true" -->',
    "false": '-. "false" .->',
    "next": "-->",
}


def _mermaid_label(text: str) -> str:
    return text.replace('"', "#quot;")


class FlowchartRenderer:
    """Render flowcharts through Jinja2 templates.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["mermaid_label"] = _mermaid_label

    def render_mermaid(self, flowchart: Flowchart) -> str:
        """Mermaid ``flowchart TD`` source for *flowchart*.

        Page ids may contain characters Mermaid reserves for arrows, so
        nodes are keyed ``n0``, ``n1``, ... in page order.
        """
        keys = {node.id: f"n{i}" for i, node in enumerate(flowchart.nodes)}
        edges = [
            {"source": keys[e.source], "target": keys[e.target], "arrow": _ARROWS[e.kind]}
            for e in flowchart.edges
            if e.source in keys and e.target in keys
        ]
        return self.render(
            MERMAID_TEMPLATE,
            nodes=[(keys[n.id], n) for n in flowchart.nodes],
            edges=edges,
        )

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)
