"""Evaluator output variants and persisted feedback records.

Evaluators return one of three tagged variants. Raw mappings returned by
user code are validated into a variant at the orchestrator boundary,
never trusted implicitly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, model_validator

from pairwise_evaluator.models.base import BaseSchema, FrozenSchema

__all__ = [
    "ComparativeScore",
    "EvaluationResult",
    "EvaluatorOutput",
    "MultiScore",
    "RunEvaluatorOutput",
    "Score",
    "SingleScore",
    "evaluator_output_adapter",
]

Score = Union[bool, int, float]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SingleScore(FrozenSchema):
    """One named score for a single run.

    Attributes:
        kind: Variant tag.
        key: Metric name.
        score: Numeric or boolean score; None when only a comment applies.
        comment: Optional explanation.

    """

    kind: Literal["single"] = "single"
    key: str = Field(..., min_length=1)
    score: Score | None = None
    comment: str | None = None


class MultiScore(FrozenSchema):
    """Several named scores produced by one evaluator call."""

    kind: Literal["multi"] = "multi"
    results: list[SingleScore] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _unique_keys(self) -> MultiScore:
        keys = [r.key for r in self.results]
        if len(keys) != len(set(keys)):
            raise ValueError(f"duplicate keys in multi-score result: {keys}")
        return self


class ComparativeScore(FrozenSchema):
    """One named score per run for a compared pair of runs.

    Attributes:
        kind: Variant tag.
        key: Metric name.
        scores: Mapping of run id to score.
        comment: Optional explanation shared by both runs.

    """

    kind: Literal["comparative"] = "comparative"
    key: str = Field(..., min_length=1)
    scores: dict[str, Score] = Field(..., min_length=1)
    comment: str | None = None


RunEvaluatorOutput = Union[SingleScore, MultiScore]

EvaluatorOutput = Annotated[
    Union[SingleScore, MultiScore, ComparativeScore],
    Field(discriminator="kind"),
]

evaluator_output_adapter: TypeAdapter[Any] = TypeAdapter(EvaluatorOutput)


class EvaluationResult(BaseSchema):
    """Feedback persisted against one run.

    Attributes:
        id: Unique feedback identifier.
        run_id: Run the feedback is attached to.
        key: Metric name.
        score: Numeric or boolean score.
        value: Optional non-numeric value.
        comment: Optional explanation.
        correction: Optional human-entered override.
        inputs: Snapshot of the scored run's inputs.
        outputs: Snapshot of the scored run's outputs.
        comparative_experiment_id: Set for comparative feedback.
        source_run_id: Id of the evaluator's own run, if traced.
        evaluator_info: Name and options of the evaluator.
        created_at: Creation timestamp.

    """

    id: str = Field(..., min_length=1)
    run_id: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    score: Score | None = None
    value: Any = None
    comment: str | None = None
    correction: dict[str, Any] | None = None
    inputs: dict[str, Any] | None = None
    outputs: dict[str, Any] | None = None
    comparative_experiment_id: str | None = None
    source_run_id: str | None = None
    evaluator_info: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
