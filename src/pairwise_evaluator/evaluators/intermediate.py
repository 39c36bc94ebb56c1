"""Evaluators that score an intermediate step of a run tree."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pairwise_evaluator.evaluation.run_evaluator import RunEvaluator
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.feedback import Score, SingleScore
from pairwise_evaluator.models.run import Run
from pairwise_evaluator.tracing.traversal import RunMatcher, find_descendant

__all__ = ["intermediate_step_evaluator"]

logger = get_logger(__name__)

StepScorer = Callable[[Run, Example | None], Any]


def intermediate_step_evaluator(
    step: str | RunMatcher,
    scorer: StepScorer,
    key: str,
    default_score: Score | None = 0,
) -> RunEvaluator:
    """Build an evaluator that scores the nearest step matching ``step``.

    Args:
        step: Step name, or a predicate over runs.
        scorer: Called as ``scorer(step_run, example)``; returns a score or
            a ``(score, comment)`` tuple.
        key: Feedback key.
        default_score: Score recorded when no step matches.

    """
    step_label = step if isinstance(step, str) else getattr(step, "__name__", "predicate")

    def evaluate_step(run: Run, example: Example | None) -> SingleScore:
        found = find_descendant(run, step)
        if found is None:
            logger.debug("intermediate_step_missing", run_id=run.id, step=step_label)
            return SingleScore(
                key=key,
                score=default_score,
                comment=f"step '{step_label}' not found",
            )
        value = scorer(found, example)
        if isinstance(value, tuple):
            score, comment = value
            return SingleScore(key=key, score=score, comment=comment)
        return SingleScore(key=key, score=value)

    return RunEvaluator(evaluate_step, name=key)
