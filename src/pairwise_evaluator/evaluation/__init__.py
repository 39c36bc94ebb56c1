"""Evaluator invocation, the worker pool, and per-run evaluation."""

from pairwise_evaluator.evaluation.exceptions import (
    ContractViolationError,
    EvaluationError,
    EvaluatorExecutionError,
)
from pairwise_evaluator.evaluation.existing import aevaluate_existing, evaluate_existing
from pairwise_evaluator.evaluation.pool import WorkerPool
from pairwise_evaluator.evaluation.run_evaluator import RunEvaluator

__all__ = [
    "ContractViolationError",
    "EvaluationError",
    "EvaluatorExecutionError",
    "RunEvaluator",
    "WorkerPool",
    "aevaluate_existing",
    "evaluate_existing",
]
