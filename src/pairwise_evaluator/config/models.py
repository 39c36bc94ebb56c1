"""Configuration models for comparison and evaluation jobs."""

from __future__ import annotations

from pydantic import Field, model_validator

from pairwise_evaluator.config.defaults import MAX_CONCURRENCY_MAX, MAX_CONCURRENCY_MIN
from pairwise_evaluator.models.base import BaseSchema

__all__ = ["JobConfig"]


class JobConfig(BaseSchema):
    """A comparison (two experiments) or evaluation (one experiment) job.

    Exactly one of ``compare`` and ``evaluate`` must be set. Options left
    unset fall back to settings.

    Attributes:
        store: Directory of the JSON file store.
        compare: Two experiment ids or names to compare.
        evaluate: Experiment id or name to evaluate run by run.
        evaluators: Import paths of evaluators ("package.module:attribute").
        randomize_order: Shuffle run order per example.
        max_concurrency: Evaluator calls allowed in flight.
        load_nested: Load full run trees.
        experiment_prefix: Name prefix of the created pairwise experiment.
        description: Description of the created pairwise experiment.
        seed: Seed for the order shuffling.

    """

    store: str | None = None
    compare: list[str] | None = Field(default=None, min_length=2, max_length=2)
    evaluate: str | None = None
    evaluators: list[str] = Field(..., min_length=1)
    randomize_order: bool | None = None
    max_concurrency: int | None = Field(
        default=None, ge=MAX_CONCURRENCY_MIN, le=MAX_CONCURRENCY_MAX
    )
    load_nested: bool | None = None
    experiment_prefix: str | None = None
    description: str | None = None
    seed: int | None = None

    @model_validator(mode="after")
    def _one_mode(self) -> JobConfig:
        if (self.compare is None) == (self.evaluate is None):
            raise ValueError("exactly one of 'compare' and 'evaluate' must be set")
        return self
