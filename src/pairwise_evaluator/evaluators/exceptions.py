"""Exceptions for the built-in evaluators."""

from pairwise_evaluator.exceptions import PairwiseEvaluatorError

__all__ = ["ClaudeAPIError", "JudgeError"]


class ClaudeAPIError(PairwiseEvaluatorError):
    """Raised when a Claude API call fails after retries."""

    pass


class JudgeError(PairwiseEvaluatorError):
    """Raised when the pairwise judge cannot produce a verdict."""

    pass
