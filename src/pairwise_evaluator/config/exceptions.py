"""Exceptions for config module.

This module defines exceptions related to configuration loading,
parsing, and validation errors.
"""

from pairwise_evaluator.exceptions import PairwiseEvaluatorError

__all__ = ["ConfigurationError"]


class ConfigurationError(PairwiseEvaluatorError):
    """Base exception for configuration-related errors."""

    pass
