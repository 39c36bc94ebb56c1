"""Built-in evaluators.

The LLM judge is imported lazily from ``pairwise_evaluator.evaluators.judge``
so that the Claude SDK is only loaded when it is used.
"""

from pairwise_evaluator.evaluators.exact_match import exact_match_preference
from pairwise_evaluator.evaluators.exceptions import ClaudeAPIError, JudgeError
from pairwise_evaluator.evaluators.intermediate import intermediate_step_evaluator

__all__ = [
    "ClaudeAPIError",
    "JudgeError",
    "exact_match_preference",
    "intermediate_step_evaluator",
]
