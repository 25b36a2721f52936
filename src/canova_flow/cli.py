"""Flow inspection CLI — ``canova-flow``.

Builds the navigation graph of a form definition file and prints the
result, so authors can check branching before uploading a form.

Examples::

    # Human-readable summary with warnings
    canova-flow build survey.yaml

    # Full BuildResult as JSON (camelCase page documents)
    canova-flow build survey.json --json

    # Also report stricter branch-rule problems
    canova-flow build survey.yaml --strict

    # Mermaid source of the flow diagram
    canova-flow build survey.yaml --mermaid
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml

from canova_flow.builder import build_flow
from canova_flow.flowchart import build_flowchart
from canova_flow.loader import load_form
from canova_flow.models.flow import BuildResult
from canova_flow.models.form import dump_pages
from canova_flow.render import FlowchartRenderer
from canova_flow.validation import find_condition_issues

logger = logging.getLogger(__name__)


def _print_summary(result: BuildResult) -> None:
    for entry in result.summary():
        marker = "*" if entry["has_conditional"] else " "
        nxt = ", ".join(entry["next_pages"]) or "(end)"
        print(f"{marker} {entry['id']:<16} {entry['name']:<24} -> {nxt}")

    if result.orphans:
        print(f"orphans: {', '.join(result.orphans)}")
    for edge in result.conflicts:
        print(f"dropped claim: {edge.source} -> {edge.target}")
    for edge in result.missing_targets:
        print(f"missing target: {edge.source} -> {edge.target}")
    if result.unreachable:
        print(f"unreachable: {', '.join(result.unreachable)}")


def _result_json(result: BuildResult) -> str:
    payload = result.model_dump(mode="json", exclude={"pages"})
    payload["pages"] = dump_pages(result.pages)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def run_build(
    path: str,
    *,
    as_json: bool = False,
    strict: bool = False,
    mermaid: bool = False,
) -> int:
    """Load *path*, build its flow and print it.  Returns the exit status."""
    try:
        form = load_form(path)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        print(f"error: cannot load {path}: {exc}", file=sys.stderr)
        return 2

    result = build_flow(form.pages)
    if as_json:
        print(_result_json(result))
    elif mermaid:
        print(FlowchartRenderer().render_mermaid(build_flowchart(result.pages)), end="")
    else:
        _print_summary(result)

    if strict:
        for issue in find_condition_issues(form.pages):
            print(f"issue [{issue.kind}] {issue.page_id}: {issue.detail}")
    return 0


def cli(argv: list[str] | None = None) -> None:
    """Console-script entry point: ``canova-flow``."""
    parser = argparse.ArgumentParser(
        prog="canova-flow",
        description="Build and inspect the page flow of a form definition.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build the flow graph of a YAML/JSON form file")
    build.add_argument("path", help="Form definition (.yaml, .yml or .json)")
    build.add_argument("--json", action="store_true", default=False, help="Print the full result as JSON")
    build.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Also list branch-rule problems (unknown questions, bad targets)",
    )
    build.add_argument(
        "--mermaid", action="store_true", default=False, help="Print the flow as Mermaid source"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    sys.exit(
        run_build(args.path, as_json=args.json, strict=args.strict, mermaid=args.mermaid)
    )
