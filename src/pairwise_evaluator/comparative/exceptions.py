"""Exceptions for comparative evaluation.

Resolution errors defined here are fatal to the whole batch since they
mean the request itself is invalid.
"""

from pairwise_evaluator.evaluation.exceptions import EvaluationError

__all__ = ["ComparativeEvaluationError", "DatasetMismatchError"]


class ComparativeEvaluationError(EvaluationError):
    """Base exception for comparative evaluation errors."""

    pass


class DatasetMismatchError(ComparativeEvaluationError):
    """Raised when the two compared experiments use different datasets."""

    def __init__(self, experiment_a: str, dataset_a: str, experiment_b: str, dataset_b: str) -> None:
        self.datasets = {experiment_a: dataset_a, experiment_b: dataset_b}
        super().__init__(
            f"Experiments must share a dataset: '{experiment_a}' uses '{dataset_a}', "
            f"'{experiment_b}' uses '{dataset_b}'"
        )
