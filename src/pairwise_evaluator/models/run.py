"""Run models.

A Run is the recorded execution of a task against one example. Runs
form an ordered tree through child_runs and are immutable once complete.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from pairwise_evaluator.models.base import FrozenSchema

__all__ = ["Run", "RunStatus"]


class RunStatus(str, Enum):
    """Execution status of a run."""

    pending = "pending"
    success = "success"
    error = "error"


class Run(FrozenSchema):
    """A recorded execution trace, possibly with nested child runs.

    Attributes:
        id: Unique run identifier.
        name: Step name (e.g. "retrieve").
        run_type: Kind of step ("chain", "llm", "retriever", "tool").
        inputs: Inputs given to the step.
        outputs: Outputs produced by the step.
        error: Error message when the step failed.
        status: Execution status.
        start_time: When the step started.
        end_time: When the step finished.
        reference_example_id: Example this root run was produced for.
        experiment_id: Experiment this run belongs to.
        child_runs: Ordered child steps.
        extra: Free-form metadata.

    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    run_type: str = "chain"
    inputs: dict[str, Any] = Field(default_factory=dict)
    outputs: dict[str, Any] | None = None
    error: str | None = None
    status: RunStatus = RunStatus.success
    start_time: datetime | None = None
    end_time: datetime | None = None
    reference_example_id: str | None = None
    experiment_id: str | None = None
    child_runs: list[Run] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)

    def without_children(self) -> Run:
        """Return a root-only copy of this run."""
        return self.model_copy(update={"child_runs": []})

    def find_descendant(self, match: str | Callable[[Run], bool]) -> Run | None:
        """Find the nearest descendant whose name matches, breadth first.

        Args:
            match: Exact step name, or a predicate over runs.

        Returns:
            The matching run, or None when no descendant matches.

        """
        from pairwise_evaluator.tracing.traversal import find_descendant

        return find_descendant(self, match)
