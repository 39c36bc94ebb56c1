"""In-memory store implementing every store capability."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Dataset, Example
from pairwise_evaluator.models.experiment import (
    ComparativeExperiment,
    Experiment,
    ExperimentRef,
)
from pairwise_evaluator.models.feedback import EvaluationResult
from pairwise_evaluator.models.run import Run
from pairwise_evaluator.stores.base import Store
from pairwise_evaluator.stores.exceptions import NotFoundError

__all__ = ["ExampleListing", "InMemoryStore"]

logger = get_logger(__name__)


class ExampleListing:
    """Lazy, restartable listing of examples.

    Each iteration re-reads the underlying snapshot and re-applies the
    filters, so a listing can be iterated any number of times.
    """

    def __init__(
        self,
        source: Iterable[Example],
        metadata: dict[str, Any] | None = None,
        splits: list[str] | None = None,
        example_ids: Iterable[str] | None = None,
    ) -> None:
        self._source = source
        self._metadata = metadata
        self._splits = splits
        self._example_ids = set(example_ids) if example_ids is not None else None

    def __iter__(self) -> Iterator[Example]:
        for example in self._source:
            if self._example_ids is not None and example.id not in self._example_ids:
                continue
            if example.matches(self._metadata, self._splits):
                yield example


class InMemoryStore(Store):
    """Keeps datasets, experiments, runs, and feedback in dictionaries."""

    def __init__(self) -> None:
        self._datasets: dict[str, Dataset] = {}
        self._experiments: dict[str, Experiment] = {}
        self._runs: dict[str, list[Run]] = {}
        self._feedback: list[EvaluationResult] = []
        self._comparative: dict[str, ComparativeExperiment] = {}

    # -- seeding -----------------------------------------------------------

    def add_dataset(self, dataset: Dataset) -> Dataset:
        self._datasets[dataset.id] = dataset
        return dataset

    def add_experiment(self, experiment: Experiment, runs: Iterable[Run] = ()) -> Experiment:
        self._experiments[experiment.id] = experiment
        self._runs[experiment.id] = [
            run if run.experiment_id else run.model_copy(update={"experiment_id": experiment.id})
            for run in runs
        ]
        return experiment

    # -- ExampleStore ------------------------------------------------------

    def read_dataset(self, dataset_id: str) -> Dataset:
        dataset = self._datasets.get(dataset_id)
        if dataset is None:
            dataset = next(
                (d for d in self._datasets.values() if d.name == dataset_id), None
            )
        if dataset is None:
            raise NotFoundError("Dataset", dataset_id)
        return dataset

    def list_examples(
        self,
        dataset_id: str,
        *,
        metadata: dict[str, Any] | None = None,
        splits: list[str] | None = None,
        as_of: int | str | datetime | None = None,
        example_ids: Iterable[str] | None = None,
    ) -> ExampleListing:
        dataset = self.read_dataset(dataset_id)
        version = dataset.version_as_of(as_of)
        if version is None:
            raise NotFoundError("Dataset version", f"{dataset_id}@{as_of}")
        return ExampleListing(
            version.examples,
            metadata=metadata,
            splits=splits,
            example_ids=example_ids,
        )

    # -- RunStore ----------------------------------------------------------

    def read_experiment(self, ref: ExperimentRef) -> Experiment:
        if isinstance(ref, Experiment):
            ref = ref.id
        key = str(ref) if isinstance(ref, UUID) else ref

        experiment = self._experiments.get(key)
        if experiment is None:
            experiment = next(
                (e for e in self._experiments.values() if e.name == key), None
            )
        if experiment is None:
            raise NotFoundError("Experiment", key)
        return experiment

    def list_runs(self, experiment_id: str, *, load_nested: bool = False) -> list[Run]:
        if experiment_id not in self._runs:
            raise NotFoundError("Experiment", experiment_id)
        runs = self._runs[experiment_id]
        if load_nested:
            return list(runs)
        return [run.without_children() for run in runs]

    # -- FeedbackSink ------------------------------------------------------

    def create_feedback(self, feedback: EvaluationResult) -> EvaluationResult:
        self._feedback.append(feedback)
        return feedback

    def create_feedback_batch(
        self, feedback: Sequence[EvaluationResult]
    ) -> list[EvaluationResult]:
        self._feedback.extend(feedback)
        return list(feedback)

    def create_comparative_experiment(
        self, experiment: ComparativeExperiment
    ) -> ComparativeExperiment:
        self._comparative[experiment.id] = experiment
        return experiment

    def read_comparative_experiment(self, experiment_id: str) -> ComparativeExperiment:
        experiment = self._comparative.get(experiment_id)
        if experiment is None:
            raise NotFoundError("Comparative experiment", experiment_id)
        return experiment

    def list_feedback(
        self,
        *,
        run_ids: Iterable[str] | None = None,
        comparative_experiment_id: str | None = None,
    ) -> list[EvaluationResult]:
        wanted = set(run_ids) if run_ids is not None else None
        return [
            fb
            for fb in self._feedback
            if (wanted is None or fb.run_id in wanted)
            and (
                comparative_experiment_id is None
                or fb.comparative_experiment_id == comparative_experiment_id
            )
        ]
