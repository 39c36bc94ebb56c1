"""Run tree traversal helpers."""

from pairwise_evaluator.tracing.traversal import (
    RunMatcher,
    find_descendant,
    find_descendants,
    iter_runs_breadth_first,
)

__all__ = [
    "RunMatcher",
    "find_descendant",
    "find_descendants",
    "iter_runs_breadth_first",
]
