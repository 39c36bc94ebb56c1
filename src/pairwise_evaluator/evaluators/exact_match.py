"""Exact-match pairwise evaluator.

Scores each run of a pair 1 when its output equals the example's
reference output and 0 otherwise. Both runs can score 1 (or 0).
"""

from __future__ import annotations

from collections.abc import Sequence

from pairwise_evaluator.comparative.evaluator import ComparativeEvaluator
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.feedback import ComparativeScore
from pairwise_evaluator.models.run import Run

__all__ = ["exact_match_preference"]


def exact_match_preference(
    reference_key: str = "output",
    output_key: str = "output",
    key: str = "ranked_preference",
    strip: bool = False,
) -> ComparativeEvaluator:
    """Build an exact-match comparative evaluator.

    Args:
        reference_key: Key of the expected value in the example's outputs.
        output_key: Key of the produced value in each run's outputs.
        key: Feedback key to record scores under.
        strip: Compare string values with surrounding whitespace removed.

    """

    def _normalize(value: object) -> object:
        if strip and isinstance(value, str):
            return value.strip()
        return value

    def ranked_preference(runs: Sequence[Run], example: Example) -> ComparativeScore:
        reference = (example.outputs or {}).get(reference_key)
        scores: dict[str, int] = {}
        for run in runs:
            produced = (run.outputs or {}).get(output_key)
            matched = reference is not None and _normalize(produced) == _normalize(reference)
            scores[run.id] = 1 if matched else 0
        return ComparativeScore(key=key, scores=scores)

    return ComparativeEvaluator(ranked_preference, name=key)
