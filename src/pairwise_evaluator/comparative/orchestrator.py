"""Comparative (pairwise) evaluation of two experiments.

The orchestrator resolves two experiments over a shared dataset, aligns
their runs by example id, and dispatches one job per (example,
evaluator) to a bounded worker pool. Each successful job writes one
feedback record per compared run, both in a single batch, so a failed
write never leaves half a pair behind. Evaluator errors and malformed
results are recorded as failures of that job; they never abort the
batch. Source experiments and runs are never modified.
"""

from __future__ import annotations

import asyncio
import random
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.comparative.aggregation import ComparativeAggregator
from pairwise_evaluator.comparative.alignment import (
    RunPair,
    align_runs,
    build_pairs,
    index_runs_by_example,
)
from pairwise_evaluator.comparative.evaluator import ComparativeEvaluator
from pairwise_evaluator.comparative.exceptions import DatasetMismatchError
from pairwise_evaluator.evaluation.exceptions import (
    ContractViolationError,
    EvaluatorExecutionError,
)
from pairwise_evaluator.evaluation.pool import WorkerPool
from pairwise_evaluator.logging_config import bind_evaluation_context, get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.experiment import Experiment, ExperimentRef
from pairwise_evaluator.models.results import (
    ComparativeExperimentResults,
    ComparativeSummary,
    JobFailure,
    PairResult,
)
from pairwise_evaluator.stores.exceptions import NotFoundError, StorageError

__all__ = [
    "ComparativeEvaluationOrchestrator",
    "aevaluate_comparative",
    "evaluate_comparative",
]

logger = get_logger(__name__)

PairwiseEvaluatorLike = ComparativeEvaluator | Callable[..., Any]

_Job = tuple[int, RunPair, int, ComparativeEvaluator]


class ComparativeEvaluationOrchestrator:
    """Runs pairwise evaluators over the aligned runs of two experiments.

    Options left as None fall back to the client's comparative settings.

    Attributes:
        client: Client used for every read and write.
        evaluators: Wrapped pairwise evaluators.
        randomize_order: Shuffle the run pair once per example.
        experiment_prefix: Name prefix of the created pairwise experiment.
        max_concurrency: Number of evaluator calls allowed in flight.
        load_nested: Load full run trees instead of root runs only.

    """

    def __init__(
        self,
        client: EvaluationClient,
        evaluators: Sequence[PairwiseEvaluatorLike],
        *,
        randomize_order: bool | None = None,
        experiment_prefix: str | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        max_concurrency: int | None = None,
        load_nested: bool | None = None,
        seed: int | None = None,
    ) -> None:
        if not evaluators:
            raise ValueError("At least one pairwise evaluator is required")

        settings = client.settings.comparative
        self.client = client
        self.evaluators = [ComparativeEvaluator.wrap(e) for e in evaluators]
        self.randomize_order = (
            settings.randomize_order if randomize_order is None else randomize_order
        )
        self.experiment_prefix = experiment_prefix
        self.description = description
        self.metadata = dict(metadata or {})
        self.max_concurrency = (
            settings.max_concurrency if max_concurrency is None else max_concurrency
        )
        self.load_nested = settings.load_nested if load_nested is None else load_nested
        self._rng = random.Random(seed)
        self._pool: WorkerPool[_Job] | None = None

    def cancel(self) -> None:
        """Stop dispatching new jobs of the current run; running jobs drain."""
        if self._pool is not None:
            self._pool.cancel()

    def run(self, experiments: Sequence[ExperimentRef]) -> ComparativeExperimentResults:
        """Synchronous wrapper around arun()."""
        return asyncio.run(self.arun(experiments))

    async def arun(
        self, experiments: Sequence[ExperimentRef]
    ) -> ComparativeExperimentResults:
        """Evaluate two experiments against each other.

        Args:
            experiments: Exactly two experiment references (id, name, or model).

        Returns:
            Results holding the created pairwise experiment, per-job results
            and failures, and the summary.

        Raises:
            ValueError: If not exactly two experiments are given.
            NotFoundError: If an experiment or example cannot be resolved.
            DatasetMismatchError: If the experiments use different datasets.

        """
        if len(experiments) != 2:
            raise ValueError(
                f"Comparative evaluation needs exactly two experiments, got {len(experiments)}"
            )

        started_at = datetime.now(timezone.utc)
        exp_a, exp_b = (self.client.read_experiment(ref) for ref in experiments)
        if exp_a.dataset_id != exp_b.dataset_id:
            raise DatasetMismatchError(exp_a.id, exp_a.dataset_id, exp_b.id, exp_b.dataset_id)

        logger.info(
            "comparative_evaluation_started",
            experiment_a=exp_a.id,
            experiment_b=exp_b.id,
            dataset_id=exp_a.dataset_id,
            evaluators=[e.name for e in self.evaluators],
            randomize_order=self.randomize_order,
            max_concurrency=self.max_concurrency,
        )

        runs_a = index_runs_by_example(
            self.client.list_runs(exp_a.id, load_nested=self.load_nested), exp_a.id
        )
        runs_b = index_runs_by_example(
            self.client.list_runs(exp_b.id, load_nested=self.load_nested), exp_b.id
        )
        aligned = align_runs(runs_a, runs_b)
        examples = self._load_examples(exp_a, exp_b, [example_id for example_id, _, _ in aligned])
        pairs = build_pairs(aligned, examples, self.randomize_order, self._rng)

        comparative = self.client.create_comparative_experiment(
            self._experiment_name(exp_a, exp_b),
            [exp_a, exp_b],
            description=self.description,
            metadata={
                **self.metadata,
                "evaluators": [e.name for e in self.evaluators],
                "randomize_order": self.randomize_order,
                "max_concurrency": self.max_concurrency,
                "load_nested": self.load_nested,
            },
        )

        outcomes: list[tuple[int, int, PairResult | JobFailure]] = []

        async def _handle(job: _Job) -> None:
            pair_index, pair, evaluator_index, evaluator = job
            outcome = await self._evaluate_pair(pair, evaluator, comparative.id)
            outcomes.append((pair_index, evaluator_index, outcome))

        jobs: list[_Job] = [
            (pair_index, pair, evaluator_index, evaluator)
            for pair_index, pair in enumerate(pairs)
            for evaluator_index, evaluator in enumerate(self.evaluators)
        ]
        pool: WorkerPool[_Job] = WorkerPool(self.max_concurrency)
        self._pool = pool
        try:
            with bind_evaluation_context(comparative_experiment_id=comparative.id):
                not_started = await pool.run(jobs, _handle)
        finally:
            self._pool = None

        outcomes.sort(key=lambda o: (o[0], o[1]))
        results = [o for _, _, o in outcomes if isinstance(o, PairResult)]
        failures = [o for _, _, o in outcomes if isinstance(o, JobFailure)]

        aggregator = ComparativeAggregator(
            (exp_a.id, exp_b.id),
            {
                **{run.id: exp_a.id for run in runs_a.values()},
                **{run.id: exp_b.id for run in runs_b.values()},
            },
        )
        summary = ComparativeSummary(
            common_examples=len(pairs),
            total_jobs=len(jobs),
            succeeded=len(results),
            failed=len(failures),
            cancelled=len(not_started),
            aggregates=aggregator.aggregate(results),
            presentation_order=aggregator.analyze_presentation_order(results),
        )

        logger.info(
            "comparative_evaluation_complete",
            comparative_experiment_id=comparative.id,
            common_examples=summary.common_examples,
            succeeded=summary.succeeded,
            failed=summary.failed,
            cancelled=summary.cancelled,
            cancel_requested=pool.cancelled,
        )

        return ComparativeExperimentResults(
            comparative_experiment=comparative,
            experiments=[exp_a, exp_b],
            results=results,
            failures=failures,
            summary=summary,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )

    async def _evaluate_pair(
        self,
        pair: RunPair,
        evaluator: ComparativeEvaluator,
        comparative_experiment_id: str,
    ) -> PairResult | JobFailure:
        """Run one evaluator on one pair and persist its scores."""
        start = time.monotonic()
        try:
            score = await evaluator.aevaluate(pair.runs, pair.example)
        except EvaluatorExecutionError as e:
            logger.warning(
                "evaluator_failed",
                evaluator=evaluator.name,
                example_id=pair.example.id,
                error=str(e.cause),
                error_type=type(e.cause).__name__,
            )
            return self._failure(pair, evaluator, "evaluator_error", e)
        except ContractViolationError as e:
            logger.warning(
                "evaluator_contract_violation",
                evaluator=evaluator.name,
                example_id=pair.example.id,
                error=str(e),
            )
            return self._failure(pair, evaluator, "contract_violation", e)
        duration_ms = int((time.monotonic() - start) * 1000)

        records = [
            self.client.build_feedback(
                run.id,
                score.key,
                score.scores[run.id],
                comment=score.comment,
                inputs=run.inputs,
                outputs=run.outputs,
                comparative_experiment_id=comparative_experiment_id,
                evaluator_info={
                    "evaluator": evaluator.name,
                    "example_id": pair.example.id,
                    "presentation_index": index,
                },
            )
            for index, run in enumerate(pair.runs)
        ]
        try:
            written = await asyncio.to_thread(self.client.create_feedback_batch, records)
        except StorageError as e:
            logger.error(
                "feedback_write_failed",
                evaluator=evaluator.name,
                example_id=pair.example.id,
                error=str(e),
            )
            return self._failure(pair, evaluator, "persistence_error", e)

        logger.debug(
            "pair_evaluated",
            evaluator=evaluator.name,
            example_id=pair.example.id,
            key=score.key,
            swapped=pair.swapped,
            duration_ms=duration_ms,
        )
        return PairResult(
            example_id=pair.example.id,
            evaluator=evaluator.name,
            run_ids=pair.run_ids,
            swapped=pair.swapped,
            result=score,
            feedback_ids=[fb.id for fb in written],
            duration_ms=duration_ms,
        )

    @staticmethod
    def _failure(
        pair: RunPair,
        evaluator: ComparativeEvaluator,
        kind: str,
        error: Exception,
    ) -> JobFailure:
        cause = error.cause if isinstance(error, EvaluatorExecutionError) else error
        return JobFailure(
            example_id=pair.example.id,
            evaluator=evaluator.name,
            run_ids=pair.run_ids,
            kind=kind,
            error=str(error),
            error_type=type(cause).__name__,
        )

    def _load_examples(
        self,
        exp_a: Experiment,
        exp_b: Experiment,
        example_ids: list[str],
    ) -> dict[str, Example]:
        """Fetch the aligned examples, trying A's version, B's, then latest."""
        examples: dict[str, Example] = {}
        if not example_ids:
            return examples

        for as_of in dict.fromkeys([exp_a.dataset_version, exp_b.dataset_version, None]):
            missing = [eid for eid in example_ids if eid not in examples]
            if not missing:
                break
            try:
                examples.update(
                    self.client.read_examples(exp_a.dataset_id, missing, as_of=as_of)
                )
            except NotFoundError:
                logger.debug(
                    "dataset_version_unavailable",
                    dataset_id=exp_a.dataset_id,
                    as_of=as_of,
                )

        missing = [eid for eid in example_ids if eid not in examples]
        if missing:
            raise NotFoundError("Example", ", ".join(missing))
        return examples

    def _experiment_name(self, exp_a: Experiment, exp_b: Experiment) -> str:
        prefix = self.experiment_prefix or f"{exp_a.name} vs. {exp_b.name}"
        return f"{prefix}-{uuid.uuid4().hex[:8]}"


async def aevaluate_comparative(
    experiments: Sequence[ExperimentRef],
    evaluators: Sequence[PairwiseEvaluatorLike],
    *,
    client: EvaluationClient,
    randomize_order: bool | None = None,
    experiment_prefix: str | None = None,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    max_concurrency: int | None = None,
    load_nested: bool | None = None,
    seed: int | None = None,
) -> ComparativeExperimentResults:
    """Evaluate two experiments against each other (coroutine form).

    See ComparativeEvaluationOrchestrator for the meaning of each option.
    """
    orchestrator = ComparativeEvaluationOrchestrator(
        client,
        evaluators,
        randomize_order=randomize_order,
        experiment_prefix=experiment_prefix,
        description=description,
        metadata=metadata,
        max_concurrency=max_concurrency,
        load_nested=load_nested,
        seed=seed,
    )
    return await orchestrator.arun(experiments)


def evaluate_comparative(
    experiments: Sequence[ExperimentRef],
    evaluators: Sequence[PairwiseEvaluatorLike],
    *,
    client: EvaluationClient,
    randomize_order: bool | None = None,
    experiment_prefix: str | None = None,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    max_concurrency: int | None = None,
    load_nested: bool | None = None,
    seed: int | None = None,
) -> ComparativeExperimentResults:
    """Evaluate two experiments against each other.

    Must not be called from a running event loop; use
    aevaluate_comparative() there instead.
    """
    return asyncio.run(
        aevaluate_comparative(
            experiments,
            evaluators,
            client=client,
            randomize_order=randomize_order,
            experiment_prefix=experiment_prefix,
            description=description,
            metadata=metadata,
            max_concurrency=max_concurrency,
            load_nested=load_nested,
            seed=seed,
        )
    )
