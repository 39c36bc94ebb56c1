"""Abstract store capabilities consumed by the orchestrators.

Example and run stores are read-only from the orchestrators' point of
view. The feedback sink is write-only and must accept concurrent writes
for distinct (run id, key) pairs without external locking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.experiment import (
    ComparativeExperiment,
    Experiment,
    ExperimentRef,
)
from pairwise_evaluator.models.feedback import EvaluationResult
from pairwise_evaluator.models.run import Run

__all__ = ["ExampleStore", "FeedbackSink", "RunStore", "Store"]


class ExampleStore(ABC):
    """Read access to dataset examples."""

    @abstractmethod
    def list_examples(
        self,
        dataset_id: str,
        *,
        metadata: dict[str, Any] | None = None,
        splits: list[str] | None = None,
        as_of: int | str | datetime | None = None,
        example_ids: Iterable[str] | None = None,
    ) -> Iterable[Example]:
        """List examples of a dataset version.

        Returns:
            A lazy iterable; iterating it again restarts the listing.

        Raises:
            NotFoundError: If the dataset or version does not exist.

        """
        pass


class RunStore(ABC):
    """Read access to experiments and their runs."""

    @abstractmethod
    def read_experiment(self, ref: ExperimentRef) -> Experiment:
        """Resolve an experiment by id (first) or name.

        Raises:
            NotFoundError: If no experiment matches.

        """
        pass

    @abstractmethod
    def list_runs(self, experiment_id: str, *, load_nested: bool = False) -> list[Run]:
        """List the root runs of an experiment.

        Args:
            experiment_id: Experiment to list.
            load_nested: Include child runs; otherwise roots are returned
                without their children.

        """
        pass


class FeedbackSink(ABC):
    """Write access for evaluation results."""

    @abstractmethod
    def create_feedback(self, feedback: EvaluationResult) -> EvaluationResult:
        """Persist one feedback record and return it."""
        pass

    @abstractmethod
    def create_feedback_batch(
        self, feedback: Sequence[EvaluationResult]
    ) -> list[EvaluationResult]:
        """Persist several feedback records as one unit.

        Either every record is stored or, on StorageError, none is.
        """
        pass

    @abstractmethod
    def create_comparative_experiment(
        self, experiment: ComparativeExperiment
    ) -> ComparativeExperiment:
        """Persist a comparative experiment record and return it."""
        pass

    @abstractmethod
    def list_feedback(
        self,
        *,
        run_ids: Iterable[str] | None = None,
        comparative_experiment_id: str | None = None,
    ) -> list[EvaluationResult]:
        """List stored feedback, optionally filtered."""
        pass


class Store(ExampleStore, RunStore, FeedbackSink, ABC):
    """A backend implementing every capability."""

    pass
