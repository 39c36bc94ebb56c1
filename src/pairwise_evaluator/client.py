"""Client facade used by the orchestrators.

The client pairs a storage backend with an explicit payload pipeline and
settings object. Everything the orchestrators read or write goes
through it, and every payload it persists passes through the pipeline
first.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from pairwise_evaluator.config.settings import Settings, get_settings
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.experiment import (
    ComparativeExperiment,
    Experiment,
    ExperimentRef,
)
from pairwise_evaluator.models.feedback import EvaluationResult, Score
from pairwise_evaluator.models.run import Run
from pairwise_evaluator.processing.pipeline import PayloadPipeline
from pairwise_evaluator.stores.base import Store

__all__ = ["EvaluationClient"]

logger = get_logger(__name__)


class EvaluationClient:
    """Reads experiments and examples, writes feedback.

    Attributes:
        store: Storage backend.
        pipeline: Transform stages applied to payloads before persistence.
        settings: Settings the client was constructed with.

    """

    def __init__(
        self,
        store: Store,
        pipeline: PayloadPipeline | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.pipeline = pipeline or PayloadPipeline.from_settings(self.settings.tracing)

    def read_experiment(self, ref: ExperimentRef) -> Experiment:
        return self.store.read_experiment(ref)

    def list_runs(self, experiment_id: str, *, load_nested: bool = False) -> list[Run]:
        return self.store.list_runs(experiment_id, load_nested=load_nested)

    def list_examples(
        self,
        dataset_id: str,
        *,
        metadata: dict[str, Any] | None = None,
        splits: list[str] | None = None,
        as_of: int | str | datetime | None = None,
        example_ids: Iterable[str] | None = None,
    ) -> Iterable[Example]:
        return self.store.list_examples(
            dataset_id,
            metadata=metadata,
            splits=splits,
            as_of=as_of,
            example_ids=example_ids,
        )

    def read_examples(
        self,
        dataset_id: str,
        example_ids: Iterable[str],
        as_of: int | str | datetime | None = None,
    ) -> dict[str, Example]:
        """Fetch several examples of one dataset version keyed by id."""
        return {
            example.id: example
            for example in self.list_examples(
                dataset_id, example_ids=list(example_ids), as_of=as_of
            )
        }

    def build_feedback(
        self,
        run_id: str,
        key: str,
        score: Score | None = None,
        *,
        value: Any = None,
        comment: str | None = None,
        correction: dict[str, Any] | None = None,
        inputs: dict[str, Any] | None = None,
        outputs: dict[str, Any] | None = None,
        comparative_experiment_id: str | None = None,
        source_run_id: str | None = None,
        evaluator_info: dict[str, Any] | None = None,
    ) -> EvaluationResult:
        """Build one feedback record with its payloads already processed.

        The run snapshot (``inputs``/``outputs``), the correction, and a
        mapping value go through the full payload pipeline. The comment and
        any other value only go through the anonymizer.
        """
        if isinstance(value, dict):
            value = self.pipeline.process_outputs(value)
        else:
            value = self.pipeline.anonymize(value)
        return EvaluationResult(
            id=str(uuid.uuid4()),
            run_id=run_id,
            key=key,
            score=score,
            value=value,
            comment=self.pipeline.anonymize(comment),
            correction=self.pipeline.process_outputs(correction),
            inputs=self.pipeline.process_inputs(inputs),
            outputs=self.pipeline.process_outputs(outputs),
            comparative_experiment_id=comparative_experiment_id,
            source_run_id=source_run_id,
            evaluator_info=evaluator_info or {},
        )

    def create_feedback(
        self,
        run_id: str,
        key: str,
        score: Score | None = None,
        **kwargs: Any,
    ) -> EvaluationResult:
        """Persist one feedback record against a run.

        Accepts the keyword arguments of build_feedback().
        """
        return self.store.create_feedback(self.build_feedback(run_id, key, score, **kwargs))

    def create_feedback_batch(
        self, feedback: Sequence[EvaluationResult]
    ) -> list[EvaluationResult]:
        """Persist records built by build_feedback() as one unit."""
        return self.store.create_feedback_batch(feedback)

    def create_comparative_experiment(
        self,
        name: str,
        experiments: list[Experiment],
        *,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ComparativeExperiment:
        """Create a comparative experiment record for two experiments."""
        comparative = ComparativeExperiment(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            experiment_ids=[e.id for e in experiments],
            reference_dataset_id=experiments[0].dataset_id,
            metadata=metadata or {},
        )
        created = self.store.create_comparative_experiment(comparative)
        logger.debug(
            "comparative_experiment_created",
            comparative_experiment_id=created.id,
            name=created.name,
        )
        return created
