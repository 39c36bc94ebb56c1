"""Per-run evaluation of an existing experiment.

Runs regular evaluators over every root run of an experiment with the
same bounded worker pool and failure isolation as comparative
evaluation. Run trees are loaded by default so evaluators can score
intermediate steps.
"""

from __future__ import annotations

import asyncio
import statistics as stats
import time
from collections import defaultdict
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.evaluation.exceptions import (
    ContractViolationError,
    EvaluatorExecutionError,
)
from pairwise_evaluator.evaluation.pool import WorkerPool
from pairwise_evaluator.evaluation.run_evaluator import RunEvaluator
from pairwise_evaluator.logging_config import bind_evaluation_context, get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.experiment import ExperimentRef
from pairwise_evaluator.models.feedback import EvaluationResult
from pairwise_evaluator.models.results import (
    EvaluationSummary,
    ExperimentEvaluationResults,
    JobFailure,
    RunKeyAggregate,
    RunResult,
)
from pairwise_evaluator.models.run import Run
from pairwise_evaluator.stores.exceptions import NotFoundError, StorageError

__all__ = ["aevaluate_existing", "evaluate_existing"]

logger = get_logger(__name__)

RunEvaluatorLike = RunEvaluator | Callable[..., Any]


async def aevaluate_existing(
    experiment: ExperimentRef,
    evaluators: Sequence[RunEvaluatorLike],
    *,
    client: EvaluationClient,
    max_concurrency: int | None = None,
    load_nested: bool = True,
) -> ExperimentEvaluationResults:
    """Score every run of an existing experiment.

    Args:
        experiment: Experiment reference (id, name, or model).
        evaluators: Regular evaluators; see RunEvaluator for signatures.
        client: Client used for every read and write.
        max_concurrency: Evaluator calls allowed in flight (default from settings).
        load_nested: Load child runs so evaluators can inspect the trace tree.

    Returns:
        Per-job results, failures, written feedback, and a summary.

    Raises:
        ValueError: If no evaluator is given.
        NotFoundError: If the experiment does not exist.

    """
    if not evaluators:
        raise ValueError("At least one evaluator is required")

    wrapped = [RunEvaluator.wrap(e) for e in evaluators]
    concurrency = (
        client.settings.comparative.max_concurrency
        if max_concurrency is None
        else max_concurrency
    )
    started_at = datetime.now(timezone.utc)

    resolved = client.read_experiment(experiment)
    runs = client.list_runs(resolved.id, load_nested=load_nested)
    examples = _load_examples(client, resolved.dataset_id, resolved.dataset_version, runs)

    logger.info(
        "experiment_evaluation_started",
        experiment_id=resolved.id,
        runs=len(runs),
        evaluators=[e.name for e in wrapped],
        max_concurrency=concurrency,
    )

    outcomes: list[tuple[int, int, RunResult | JobFailure]] = []
    feedback: list[EvaluationResult] = []

    async def _handle(job: tuple[int, Run, int, RunEvaluator]) -> None:
        run_index, run, evaluator_index, evaluator = job
        example = examples.get(run.reference_example_id or "")
        start = time.monotonic()
        try:
            scores = await evaluator.aevaluate(run, example)
        except (EvaluatorExecutionError, ContractViolationError) as e:
            kind = "evaluator_error" if isinstance(e, EvaluatorExecutionError) else "contract_violation"
            cause = e.cause if isinstance(e, EvaluatorExecutionError) else e
            logger.warning(
                "evaluator_failed",
                evaluator=evaluator.name,
                run_id=run.id,
                kind=kind,
                error=str(e),
            )
            outcomes.append(
                (
                    run_index,
                    evaluator_index,
                    JobFailure(
                        example_id=run.reference_example_id,
                        evaluator=evaluator.name,
                        run_ids=[run.id],
                        kind=kind,
                        error=str(e),
                        error_type=type(cause).__name__,
                    ),
                )
            )
            return
        duration_ms = int((time.monotonic() - start) * 1000)

        records = [
            client.build_feedback(
                run.id,
                score.key,
                score.score,
                comment=score.comment,
                inputs=run.inputs,
                outputs=run.outputs,
                evaluator_info={"evaluator": evaluator.name},
            )
            for score in scores
        ]
        try:
            written = await asyncio.to_thread(client.create_feedback_batch, records)
        except StorageError as e:
            logger.error("feedback_write_failed", run_id=run.id, error=str(e))
            outcomes.append(
                (
                    run_index,
                    evaluator_index,
                    JobFailure(
                        example_id=run.reference_example_id,
                        evaluator=evaluator.name,
                        run_ids=[run.id],
                        kind="persistence_error",
                        error=str(e),
                        error_type=type(e).__name__,
                    ),
                )
            )
            return

        feedback.extend(written)
        outcomes.append(
            (
                run_index,
                evaluator_index,
                RunResult(
                    example_id=run.reference_example_id,
                    run_id=run.id,
                    evaluator=evaluator.name,
                    results=scores,
                    feedback_ids=[fb.id for fb in written],
                    duration_ms=duration_ms,
                ),
            )
        )

    pool: WorkerPool[tuple[int, Run, int, RunEvaluator]] = WorkerPool(concurrency)
    jobs = [
        (run_index, run, evaluator_index, evaluator)
        for run_index, run in enumerate(runs)
        for evaluator_index, evaluator in enumerate(wrapped)
    ]
    with bind_evaluation_context(experiment_id=resolved.id):
        not_started = await pool.run(jobs, _handle)

    outcomes.sort(key=lambda o: (o[0], o[1]))
    results = [o for _, _, o in outcomes if isinstance(o, RunResult)]
    failures = [o for _, _, o in outcomes if isinstance(o, JobFailure)]

    summary = EvaluationSummary(
        total_runs=len(runs),
        total_jobs=len(jobs),
        succeeded=len(results),
        failed=len(failures),
        cancelled=len(not_started),
        aggregates=_aggregate(results),
    )
    logger.info(
        "experiment_evaluation_complete",
        experiment_id=resolved.id,
        succeeded=summary.succeeded,
        failed=summary.failed,
    )
    return ExperimentEvaluationResults(
        experiment=resolved,
        results=results,
        failures=failures,
        feedback=feedback,
        summary=summary,
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
    )


def evaluate_existing(
    experiment: ExperimentRef,
    evaluators: Sequence[RunEvaluatorLike],
    *,
    client: EvaluationClient,
    max_concurrency: int | None = None,
    load_nested: bool = True,
) -> ExperimentEvaluationResults:
    """Synchronous form of aevaluate_existing()."""
    return asyncio.run(
        aevaluate_existing(
            experiment,
            evaluators,
            client=client,
            max_concurrency=max_concurrency,
            load_nested=load_nested,
        )
    )


def _load_examples(
    client: EvaluationClient,
    dataset_id: str,
    dataset_version: int | None,
    runs: list[Run],
) -> dict[str, Example]:
    """Fetch the examples referenced by runs; missing ones map to nothing."""
    example_ids = {run.reference_example_id for run in runs if run.reference_example_id}
    if not example_ids:
        return {}
    try:
        return client.read_examples(dataset_id, example_ids, as_of=dataset_version)
    except NotFoundError:
        logger.warning(
            "examples_unavailable",
            dataset_id=dataset_id,
            dataset_version=dataset_version,
        )
        return {}


def _aggregate(results: list[RunResult]) -> list[RunKeyAggregate]:
    values: dict[str, list[float]] = defaultdict(list)
    counts: dict[str, int] = defaultdict(int)
    for result in results:
        for score in result.results:
            counts[score.key] += 1
            if score.score is not None:
                values[score.key].append(float(score.score))
    return [
        RunKeyAggregate(
            key=key,
            count=counts[key],
            mean_score=stats.mean(values[key]) if values[key] else None,
        )
        for key in sorted(counts)
    ]
