"""Comparative (pairwise) evaluation of two experiments.

This package aligns the runs of two experiments over a shared dataset,
invokes pairwise evaluators with bounded concurrency, persists feedback
for each compared run, and summarises the outcome.
"""

from pairwise_evaluator.comparative.aggregation import ComparativeAggregator
from pairwise_evaluator.comparative.evaluator import ComparativeEvaluator
from pairwise_evaluator.comparative.exceptions import (
    ComparativeEvaluationError,
    DatasetMismatchError,
)
from pairwise_evaluator.comparative.orchestrator import (
    ComparativeEvaluationOrchestrator,
    aevaluate_comparative,
    evaluate_comparative,
)

__all__ = [
    "ComparativeAggregator",
    "ComparativeEvaluationError",
    "ComparativeEvaluationOrchestrator",
    "ComparativeEvaluator",
    "DatasetMismatchError",
    "aevaluate_comparative",
    "evaluate_comparative",
]
