"""Experiment models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Union
from uuid import UUID

from pydantic import Field

from pairwise_evaluator.models.base import BaseSchema

__all__ = ["ComparativeExperiment", "Experiment", "ExperimentRef"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Experiment(BaseSchema):
    """One execution of a task over a whole dataset version.

    Attributes:
        id: Unique experiment identifier.
        name: Human-readable experiment name.
        dataset_id: Dataset the experiment ran against.
        dataset_version: Dataset version the experiment is bound to.
        description: Optional description.
        metadata: Free-form metadata (model, prompt version, ...).
        created_at: Creation timestamp.

    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    dataset_id: str = Field(..., min_length=1)
    dataset_version: int | None = Field(default=None, ge=1)
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)


ExperimentRef = Union[str, UUID, Experiment]


class ComparativeExperiment(BaseSchema):
    """A pairwise experiment holding comparative feedback for two experiments.

    Attributes:
        id: Unique comparative experiment identifier.
        name: Generated name (prefix plus short random suffix).
        description: Optional description.
        experiment_ids: The two compared experiment ids, in order.
        reference_dataset_id: Dataset shared by both experiments.
        metadata: Free-form metadata, including the options used.
        created_at: Creation timestamp.

    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    experiment_ids: list[str] = Field(..., min_length=2, max_length=2)
    reference_dataset_id: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
