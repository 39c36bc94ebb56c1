"""Wrapper turning a user function into a validated per-run evaluator."""

from __future__ import annotations

from collections.abc import Callable, Mapping
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
from pairwise_evaluator.models.feedback import (
    MultiScore,
    SingleScore,
    evaluator_output_adapter,
)
from pairwise_evaluator.models.run import Run

__all__ = ["RunEvaluator", "coerce_run_result"]

_POSITIONAL = ("run", "example")


def coerce_run_result(evaluator: str, raw: Any) -> list[SingleScore]:
    """Validate an evaluator's return value into a list of single scores.

    Accepts SingleScore, MultiScore, or a mapping shaped like either.

    Raises:
        ContractViolationError: If the value matches neither variant.

    """
    if isinstance(raw, SingleScore):
        return [raw]
    if isinstance(raw, MultiScore):
        return list(raw.results)
    if not isinstance(raw, Mapping):
        raise ContractViolationError(
            evaluator,
            f"expected SingleScore, MultiScore or a mapping, got {type(raw).__name__}",
        )

    kind = raw.get("kind")
    if kind is None:
        kind = "multi" if "results" in raw else "single"
    if kind not in ("single", "multi"):
        raise ContractViolationError(evaluator, f"unsupported result kind {kind!r}")
    try:
        result = evaluator_output_adapter.validate_python({**raw, "kind": kind})
    except ValidationError as e:
        raise ContractViolationError(evaluator, str(e)) from e
    return list(result.results) if isinstance(result, MultiScore) else [result]


class RunEvaluator:
    """Scores one run against its example.

    The wrapped function receives ``(run, example)`` positionally, or any
    of ``run``, ``example``, ``inputs``, ``outputs``, ``reference_outputs``
    by name when its parameters use only those names.

    Attributes:
        name: Evaluator name used in logs, failures, and feedback.

    """

    def __init__(self, func: Callable[..., Any], name: str | None = None) -> None:
        self._func = func
        self.name = name or evaluator_name(func)

    @classmethod
    def wrap(cls, evaluator: RunEvaluator | Callable[..., Any]) -> RunEvaluator:
        if isinstance(evaluator, RunEvaluator):
            return evaluator
        return cls(evaluator)

    async def __call__(self, run: Run, example: Example | None) -> list[SingleScore]:
        return await self.aevaluate(run, example)

    async def aevaluate(self, run: Run, example: Example | None) -> list[SingleScore]:
        """Invoke the evaluator and validate its result.

        Raises:
            EvaluatorExecutionError: If the evaluator raises.
            ContractViolationError: If the result is malformed.

        """
        available = {
            "run": run,
            "example": example,
            "inputs": example.inputs if example is not None else run.inputs,
            "outputs": run.outputs or {},
            "reference_outputs": (example.outputs or {}) if example is not None else {},
        }
        args, kwargs = bind_arguments(self._func, available, _POSITIONAL)
        try:
            raw = await call_evaluator(self._func, args, kwargs)
        except Exception as e:
            raise EvaluatorExecutionError(self.name, e) from e
        return coerce_run_result(self.name, raw)
