"""Breadth-first traversal of run trees.

Evaluators use these helpers to score an intermediate step of a run
instead of its final output. Lookups are total: a missing step yields
None (or an empty list), never an exception, so callers can fall back to
a default score.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pairwise_evaluator.models.run import Run

__all__ = [
    "RunMatcher",
    "find_descendant",
    "find_descendants",
    "iter_runs_breadth_first",
]

RunMatcher = Callable[["Run"], bool]


def iter_runs_breadth_first(root: Run, include_root: bool = True) -> Iterator[Run]:
    """Yield runs level by level, siblings in insertion order.

    Args:
        root: Root of the tree.
        include_root: Whether to yield the root itself first.

    """
    queue: deque[Run] = deque([root])
    first = True
    while queue:
        run = queue.popleft()
        if not first or include_root:
            yield run
        first = False
        queue.extend(run.child_runs)


def _as_matcher(match: str | RunMatcher) -> RunMatcher:
    if isinstance(match, str):
        name = match
        return lambda run: run.name == name
    return match


def find_descendant(root: Run, match: str | RunMatcher) -> Run | None:
    """Find the nearest descendant matching a name or predicate.

    The root itself is never returned. Among runs at the same depth the
    one recorded first wins.

    Args:
        root: Root of the tree.
        match: Exact step name, or a predicate over runs.

    Returns:
        The first matching descendant, or None.

    """
    matcher = _as_matcher(match)
    for run in iter_runs_breadth_first(root, include_root=False):
        if matcher(run):
            return run
    return None


def find_descendants(root: Run, match: str | RunMatcher) -> list[Run]:
    """Return every descendant matching a name or predicate, breadth first."""
    matcher = _as_matcher(match)
    return [
        run for run in iter_runs_breadth_first(root, include_root=False) if matcher(run)
    ]
