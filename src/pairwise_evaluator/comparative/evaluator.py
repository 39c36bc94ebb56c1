"""Wrapper turning a user function into a validated pairwise evaluator."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pairwise_evaluator.evaluation.exceptions import (
    ContractViolationError,
    EvaluatorExecutionError,
)
from pairwise_evaluator.evaluation.invoke import (
    bind_arguments,
    call_evaluator,
    evaluator_name,
)
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.feedback import ComparativeScore, evaluator_output_adapter
from pairwise_evaluator.models.run import Run

__all__ = ["ComparativeEvaluator", "coerce_comparative_result"]

_POSITIONAL = ("runs", "example")


def coerce_comparative_result(
    evaluator: str,
    raw: Any,
    run_ids: Sequence[str],
) -> ComparativeScore:
    """Validate an evaluator's return value against the compared pair.

    Args:
        evaluator: Evaluator name, for error messages.
        raw: ComparativeScore or a mapping with ``key`` and ``scores``.
        run_ids: The two run ids presented to the evaluator.

    Returns:
        The validated comparative score.

    Raises:
        ContractViolationError: If the value is malformed or its scores do
            not cover exactly the presented run ids.

    """
    if isinstance(raw, Mapping):
        kind = raw.get("kind", "comparative")
        if kind != "comparative":
            raise ContractViolationError(
                evaluator, f"expected a comparative result, got kind {kind!r}"
            )
        data = {**raw, "kind": "comparative"}
        if isinstance(data.get("scores"), Mapping):
            data["scores"] = {str(k): v for k, v in data["scores"].items()}
        try:
            result = evaluator_output_adapter.validate_python(data)
        except ValidationError as e:
            raise ContractViolationError(evaluator, str(e)) from e
    elif isinstance(raw, ComparativeScore):
        result = raw
    else:
        raise ContractViolationError(
            evaluator,
            f"expected ComparativeScore or a mapping, got {type(raw).__name__}",
        )

    expected = set(run_ids)
    got = set(result.scores)
    if got != expected:
        missing = sorted(expected - got)
        extra = sorted(got - expected)
        raise ContractViolationError(
            evaluator,
            f"scores must cover exactly the compared runs (missing={missing}, extra={extra})",
        )
    return result


class ComparativeEvaluator:
    """Scores two runs of the same example against each other.

    The wrapped function receives ``(runs, example)`` positionally, or any
    of ``runs``, ``example``, ``inputs``, ``outputs``, ``reference_outputs``
    by name when its parameters use only those names. ``outputs`` is the
    list of both runs' outputs in presentation order.

    Attributes:
        name: Evaluator name used in logs, failures, and feedback.

    """

    def __init__(self, func: Callable[..., Any], name: str | None = None) -> None:
        self._func = func
        self.name = name or evaluator_name(func)

    @classmethod
    def wrap(
        cls, evaluator: ComparativeEvaluator | Callable[..., Any]
    ) -> ComparativeEvaluator:
        if isinstance(evaluator, ComparativeEvaluator):
            return evaluator
        return cls(evaluator)

    async def __call__(self, runs: Sequence[Run], example: Example) -> ComparativeScore:
        return await self.aevaluate(runs, example)

    async def aevaluate(self, runs: Sequence[Run], example: Example) -> ComparativeScore:
        """Invoke the evaluator on an ordered run pair and validate its result.

        Raises:
            EvaluatorExecutionError: If the evaluator raises.
            ContractViolationError: If the result is malformed.

        """
        run_list = list(runs)
        available = {
            "runs": run_list,
            "example": example,
            "inputs": example.inputs,
            "outputs": [run.outputs or {} for run in run_list],
            "reference_outputs": example.outputs or {},
        }
        args, kwargs = bind_arguments(self._func, available, _POSITIONAL)
        try:
            raw = await call_evaluator(self._func, args, kwargs)
        except Exception as e:
            raise EvaluatorExecutionError(self.name, e) from e
        return coerce_comparative_result(self.name, raw, [run.id for run in run_list])
