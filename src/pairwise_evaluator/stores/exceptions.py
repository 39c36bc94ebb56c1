"""Exceptions for the stores module.

This module defines exceptions raised when records cannot be found or
the backing storage cannot be read or written.
"""

from pairwise_evaluator.exceptions import PairwiseEvaluatorError

__all__ = ["NotFoundError", "StorageError"]


class NotFoundError(PairwiseEvaluatorError):
    """Raised when an experiment, dataset, or example does not exist."""

    def __init__(self, kind: str, ref: object) -> None:
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} not found: {ref}")


class StorageError(PairwiseEvaluatorError):
    """Raised when the backing storage cannot be read or written."""

    pass
