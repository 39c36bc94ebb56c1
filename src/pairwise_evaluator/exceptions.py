"""Base exceptions for pairwise-evaluator.

This module defines the root exception hierarchy for the whole package.
All domain-specific exceptions should inherit from PairwiseEvaluatorError.
"""

__all__ = ["PairwiseEvaluatorError"]


class PairwiseEvaluatorError(Exception):
    """Base exception for all pairwise-evaluator errors.

    Provides a common exception type for clients to catch framework errors.
    """

    pass
