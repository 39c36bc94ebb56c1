"""Result and summary models for evaluation batches.

This module defines the per-job records produced by the comparative and
per-run orchestrators, the aggregates computed over them, and the
top-level result objects returned to callers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field

from pairwise_evaluator.models.base import BaseSchema
from pairwise_evaluator.models.experiment import ComparativeExperiment, Experiment
from pairwise_evaluator.models.feedback import (
    ComparativeScore,
    EvaluationResult,
    SingleScore,
)

__all__ = [
    "ComparativeExperimentResults",
    "ComparativeSummary",
    "EvaluationSummary",
    "ExperimentEvaluationResults",
    "FailureKind",
    "JobFailure",
    "KeyAggregate",
    "PairResult",
    "PresentationOrderAnalysis",
    "RunResult",
    "RunKeyAggregate",
]

FailureKind = Literal["evaluator_error", "contract_violation", "persistence_error"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PairResult(BaseSchema):
    """Successful comparative evaluation of one example by one evaluator.

    Attributes:
        example_id: Example both runs were produced for.
        evaluator: Evaluator name.
        run_ids: Run ids in the order they were presented to the evaluator.
        swapped: Whether the presentation order differs from experiment order.
        result: Validated comparative score.
        feedback_ids: Ids of the feedback records written, one per run.
        duration_ms: Evaluator wall time in milliseconds.

    """

    example_id: str
    evaluator: str
    run_ids: list[str] = Field(..., min_length=2, max_length=2)
    swapped: bool = False
    result: ComparativeScore
    feedback_ids: list[str] = Field(default_factory=list)
    duration_ms: int = Field(default=0, ge=0)


class RunResult(BaseSchema):
    """Successful per-run evaluation of one run by one evaluator.

    Attributes:
        example_id: Example the run was produced for.
        run_id: Evaluated run.
        evaluator: Evaluator name.
        results: Validated scores (one per key).
        feedback_ids: Ids of the feedback records written.
        duration_ms: Evaluator wall time in milliseconds.

    """

    example_id: str | None = None
    run_id: str
    evaluator: str
    results: list[SingleScore] = Field(default_factory=list)
    feedback_ids: list[str] = Field(default_factory=list)
    duration_ms: int = Field(default=0, ge=0)


class JobFailure(BaseSchema):
    """A job that did not produce feedback.

    Attributes:
        example_id: Example of the failed job.
        evaluator: Evaluator name.
        run_ids: Runs involved in the job.
        kind: What went wrong.
        error: Error message.
        error_type: Exception class name.

    """

    example_id: str | None = None
    evaluator: str
    run_ids: list[str] = Field(default_factory=list)
    kind: FailureKind
    error: str
    error_type: str


class KeyAggregate(BaseSchema):
    """Aggregate of one comparative metric key across all examples.

    Scores are compared per example: the run with the higher score wins.
    Signed differences are taken as experiment A minus experiment B.

    Attributes:
        key: Metric name.
        count: Number of examples scored under this key.
        wins: Wins per experiment id.
        ties: Number of ties.
        mean_scores: Mean score per experiment id.
        p_value: Wilcoxon signed-rank two-sided p-value, when computable.
        effect_size: Cohen's d of the signed differences.
        confidence_interval: Bootstrap CI of the mean signed difference.
        preferred_experiment_id: Experiment with more wins, None on a draw.

    """

    key: str
    count: int = Field(default=0, ge=0)
    wins: dict[str, int] = Field(default_factory=dict)
    ties: int = Field(default=0, ge=0)
    mean_scores: dict[str, float] = Field(default_factory=dict)
    p_value: float | None = Field(default=None, ge=0.0, le=1.0)
    effect_size: float | None = None
    confidence_interval: tuple[float, float] | None = None
    preferred_experiment_id: str | None = None


class PresentationOrderAnalysis(BaseSchema):
    """How often the first-presented run won when order was shuffled.

    Attributes:
        decided_pairs: Pairs with a winner (ties excluded).
        swapped_pairs: Pairs presented in swapped order.
        first_position_win_rate: Fraction of decided pairs won by the first run.
        detected_bias: "first" or "second" when the rate is lopsided.

    """

    decided_pairs: int = Field(..., ge=0)
    swapped_pairs: int = Field(..., ge=0)
    first_position_win_rate: float = Field(..., ge=0.0, le=1.0)
    detected_bias: Literal["first", "second"] | None = None


class ComparativeSummary(BaseSchema):
    """Outcome counts and aggregates of a comparative evaluation.

    Attributes:
        common_examples: Examples present in both experiments.
        total_jobs: Jobs in scope (examples x evaluators).
        succeeded: Jobs that produced feedback.
        failed: Jobs recorded as failures.
        cancelled: Jobs never started because the batch was cancelled.
        aggregates: Per-key aggregates.
        presentation_order: Position analysis when order was shuffled.

    """

    common_examples: int = Field(default=0, ge=0)
    total_jobs: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
    aggregates: list[KeyAggregate] = Field(default_factory=list)
    presentation_order: PresentationOrderAnalysis | None = None


class ComparativeExperimentResults(BaseSchema):
    """Everything produced by one comparative evaluation.

    Attributes:
        comparative_experiment: The created pairwise experiment.
        experiments: The two compared experiments, in order.
        results: Successful jobs.
        failures: Failed jobs.
        summary: Counts and aggregates.
        started_at: When the batch started.
        finished_at: When the batch finished.

    """

    comparative_experiment: ComparativeExperiment
    experiments: list[Experiment] = Field(..., min_length=2, max_length=2)
    results: list[PairResult] = Field(default_factory=list)
    failures: list[JobFailure] = Field(default_factory=list)
    summary: ComparativeSummary = Field(default_factory=ComparativeSummary)
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @property
    def experiment_id(self) -> str:
        """Identifier of the created pairwise experiment."""
        return self.comparative_experiment.id

    def feedback_for_example(self, example_id: str) -> list[PairResult]:
        """Return the successful jobs for one example."""
        return [r for r in self.results if r.example_id == example_id]


class RunKeyAggregate(BaseSchema):
    """Aggregate of one per-run metric key across an experiment."""

    key: str
    count: int = Field(default=0, ge=0)
    mean_score: float | None = None


class EvaluationSummary(BaseSchema):
    """Outcome counts of a per-run evaluation."""

    total_runs: int = Field(default=0, ge=0)
    total_jobs: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
    aggregates: list[RunKeyAggregate] = Field(default_factory=list)


class ExperimentEvaluationResults(BaseSchema):
    """Everything produced by evaluating an existing experiment's runs."""

    experiment: Experiment
    results: list[RunResult] = Field(default_factory=list)
    failures: list[JobFailure] = Field(default_factory=list)
    feedback: list[EvaluationResult] = Field(default_factory=list)
    summary: EvaluationSummary = Field(default_factory=EvaluationSummary)
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime | None = None
