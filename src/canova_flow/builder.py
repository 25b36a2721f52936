"""Flow graph builder — derives next/prev page links from branch rules.

Given the ordered pages of a form, :func:`build_flow` recomputes every
page's ``next_page_id`` and ``prev_page_id`` from scratch:

  1. **Conditional pass** — starting at the first page, each page with a
     branch rule attaches its true target, then its false target, as long
     as the target exists and has not been *claimed* yet.  A newly claimed
     target is expanded before the false branch of its parent (depth-first,
     true before false).
  2. **Linear pass** — every page still without a successor is linked to
     the first later page (in page order) that is unclaimed.  A page
     attached this way has its own branch rule expanded at once, so rules
     on pages reached only linearly still claim their targets.
  3. **Diagnostics** — orphans (never claimed), dropped claims, dangling
     targets and pages unreachable from the first page are collected on
     the returned :class:`BuildResult` and logged.

The claim rule keeps every page the successor of at most one other page,
and the first page is pre-claimed so it is never anyone's successor.
Nothing here raises for malformed author input: unknown targets are
ignored, conflicting claims are dropped and cycles stop expanding.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from canova_flow.models.flow import BuildResult, Edge
from canova_flow.models.form import Page

logger = logging.getLogger(__name__)


@dataclass
class TraversalState:
    """Bookkeeping owned by a single build.

    Attributes:
        pages_by_id: index of the (copied) pages being rebuilt
        claimed: page ids already attached as someone's successor
        visited: page ids whose branch rule has been expanded
        conflicts: branch edges dropped because the target was claimed
        missing: branch edges whose target is not a page of the form
    """

    pages_by_id: dict[str, Page]
    claimed: set[str] = field(default_factory=set)
    visited: set[str] = field(default_factory=set)
    conflicts: list[Edge] = field(default_factory=list)
    missing: list[Edge] = field(default_factory=list)

    def attach(self, source: Page, target: Page) -> None:
        """Link *source* -> *target* and mark the target claimed."""
        source.next_page_id.append(target.id)
        target.prev_page_id.append(source.id)
        self.claimed.add(target.id)


# Work items for the conditional pass.  An "expand" item opens a page's
# branch rule; a "branch" item tries to claim one of its targets.
_EXPAND = "expand"
_BRANCH = "branch"


def _expand_conditionals(state: TraversalState, start_id: str, max_depth: int) -> None:
    """Depth-first expansion of branch rules reachable from *start_id*.

    Uses an explicit stack.  The false branch of a page is queued beneath
    its true branch, and the expansion of a freshly claimed target is pushed
    on top, so the whole true subtree is settled before the false target is
    checked for a claim.
    """
    stack: list[tuple[str, str, int, str | None]] = [(_EXPAND, start_id, 0, None)]

    while stack:
        kind, page_id, depth, target_id = stack.pop()

        if kind == _EXPAND:
            if depth > max_depth or page_id in state.visited:
                continue
            state.visited.add(page_id)

            page = state.pages_by_id.get(page_id)
            if page is None or page.conditional_logic is None:
                continue

            logic = page.conditional_logic
            # Pushed in reverse so the true branch is handled first
            for target in (logic.false_page_id, logic.true_page_id):
                if target:
                    stack.append((_BRANCH, page_id, depth, target))
            continue

        # --- Branch: try to claim target_id for page_id ---
        source = state.pages_by_id[page_id]
        target = state.pages_by_id.get(target_id)
        if target is None:
            state.missing.append(Edge(source=page_id, target=target_id))
            continue
        if target_id in state.claimed or target_id == page_id:
            state.conflicts.append(Edge(source=page_id, target=target_id))
            continue

        state.attach(source, target)
        stack.append((_EXPAND, target_id, depth + 1, None))


def _link_linear(state: TraversalState, pages: list[Page], max_depth: int) -> None:
    """Chain every successor-less page to the next unclaimed page.

    A newly attached page with an unexpanded branch rule is expanded
    before the chain moves on.
    """
    for i, page in enumerate(pages[:-1]):
        if page.next_page_id:
            continue
        for candidate in pages[i + 1:]:
            if candidate.id not in state.claimed:
                state.attach(page, candidate)
                if (
                    candidate.conditional_logic is not None
                    and candidate.id not in state.visited
                ):
                    _expand_conditionals(state, candidate.id, max_depth)
                break


def _dedupe(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def _reachable_from(first: Page, pages_by_id: dict[str, Page]) -> set[str]:
    seen = {first.id}
    queue = deque([first.id])
    while queue:
        for nxt in pages_by_id[queue.popleft()].next_page_id:
            if nxt not in seen and nxt in pages_by_id:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def build_flow(pages: list[Page]) -> BuildResult:
    """Recompute the navigation graph of a form.

    The input pages are not modified; the result holds deep copies whose
    ``next_page_id`` / ``prev_page_id`` replace whatever was stored before.
    The output is deterministic for a given page order, so building twice
    yields the same graph.
    """
    if not pages:
        return BuildResult(pages=[])

    rebuilt = [p.model_copy(deep=True) for p in pages]
    for page in rebuilt:
        page.next_page_id = []
        page.prev_page_id = []

    # Later duplicates of an id shadow earlier ones, as in a plain dict index
    state = TraversalState(pages_by_id={p.id: p for p in rebuilt})
    first = rebuilt[0]
    max_depth = len(rebuilt)

    # --- Conditional pass ---
    state.claimed.add(first.id)
    _expand_conditionals(state, first.id, max_depth)

    # --- Linear pass ---
    _link_linear(state, rebuilt, max_depth)

    for page in rebuilt:
        page.next_page_id = _dedupe(page.next_page_id)
        page.prev_page_id = _dedupe(page.prev_page_id)

    # --- Diagnostics ---
    orphans = [p.id for p in rebuilt[1:] if p.id not in state.claimed]
    reachable = _reachable_from(first, state.pages_by_id)
    unreachable = [p.id for p in rebuilt if p.id not in reachable]

    result = BuildResult(
        pages=rebuilt,
        orphans=orphans,
        conflicts=state.conflicts,
        missing_targets=state.missing,
        unreachable=unreachable,
    )
    _log_diagnostics(result)
    return result


def _log_diagnostics(result: BuildResult) -> None:
    if result.orphans:
        logger.warning("Orphaned pages (unreachable in flow): %s", result.orphans)
    if result.conflicts:
        logger.warning(
            "Dropped branch edges to already-claimed pages: %s",
            [(e.source, e.target) for e in result.conflicts],
        )
    if result.missing_targets:
        logger.warning(
            "Branch targets not found in form: %s",
            [(e.source, e.target) for e in result.missing_targets],
        )
    unreachable_claimed = sorted(set(result.unreachable) - set(result.orphans))
    if unreachable_claimed:
        logger.warning("Pages claimed but not reachable from the first page: %s", unreachable_claimed)
    logger.debug("Flow summary: %s", result.summary())
