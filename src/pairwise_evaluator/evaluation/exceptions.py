"""Exceptions raised while invoking evaluators.

These errors are isolated per job: the orchestrators record them as
failures of one (example, evaluator) job and carry on with the batch.
"""

from pairwise_evaluator.exceptions import PairwiseEvaluatorError

__all__ = ["ContractViolationError", "EvaluationError", "EvaluatorExecutionError"]


class EvaluationError(PairwiseEvaluatorError):
    """Base exception for evaluation errors."""

    pass


class EvaluatorExecutionError(EvaluationError):
    """Raised when user evaluator code raises.

    Attributes:
        evaluator: Name of the failing evaluator.

    """

    def __init__(self, evaluator: str, cause: BaseException) -> None:
        self.evaluator = evaluator
        self.cause = cause
        super().__init__(f"Evaluator '{evaluator}' raised {type(cause).__name__}: {cause}")


class ContractViolationError(EvaluationError):
    """Raised when an evaluator returns a malformed result.

    Attributes:
        evaluator: Name of the offending evaluator.

    """

    def __init__(self, evaluator: str, message: str) -> None:
        self.evaluator = evaluator
        super().__init__(f"Evaluator '{evaluator}' violated its result contract: {message}")
