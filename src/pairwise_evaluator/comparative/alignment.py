"""Alignment of two experiments' runs by example id."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone

from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.run import Run

__all__ = ["RunPair", "align_runs", "build_pairs", "index_runs_by_example"]

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class RunPair:
    """Two runs of one example in presentation order.

    Attributes:
        example: The shared example.
        runs: Runs in the order evaluators see them.
        swapped: True when runs[0] belongs to the second experiment.

    """

    example: Example
    runs: tuple[Run, Run]
    swapped: bool = False

    @property
    def run_ids(self) -> list[str]:
        return [run.id for run in self.runs]


def _start_key(run: Run) -> datetime:
    if run.start_time is None:
        return _EPOCH
    if run.start_time.tzinfo is None:
        return run.start_time.replace(tzinfo=timezone.utc)
    return run.start_time


def index_runs_by_example(runs: list[Run], experiment_id: str) -> dict[str, Run]:
    """Key root runs by their reference example id.

    Runs without a reference example are skipped. When an experiment has
    several runs for one example, the earliest-started run is kept.
    Insertion order follows the first run seen for each example.
    """
    indexed: dict[str, Run] = {}
    skipped = 0
    for run in runs:
        example_id = run.reference_example_id
        if example_id is None:
            skipped += 1
            continue
        current = indexed.get(example_id)
        if current is None:
            indexed[example_id] = run
            continue
        logger.warning(
            "duplicate_runs_for_example",
            experiment_id=experiment_id,
            example_id=example_id,
            kept_run_id=min(current, run, key=_start_key).id,
        )
        if _start_key(run) < _start_key(current):
            indexed[example_id] = run

    if skipped:
        logger.warning(
            "runs_without_reference_example",
            experiment_id=experiment_id,
            skipped=skipped,
        )
    return indexed


def align_runs(
    runs_a: dict[str, Run],
    runs_b: dict[str, Run],
) -> list[tuple[str, Run, Run]]:
    """Intersect two run indexes, following the first index's order."""
    return [
        (example_id, run_a, runs_b[example_id])
        for example_id, run_a in runs_a.items()
        if example_id in runs_b
    ]


def build_pairs(
    aligned: list[tuple[str, Run, Run]],
    examples: dict[str, Example],
    randomize_order: bool = False,
    rng: random.Random | None = None,
) -> list[RunPair]:
    """Build presentation-ordered pairs, shuffling once per example."""
    rng = rng or random.Random()
    pairs: list[RunPair] = []
    for example_id, run_a, run_b in aligned:
        swapped = randomize_order and rng.random() < 0.5
        runs = (run_b, run_a) if swapped else (run_a, run_b)
        pairs.append(RunPair(example=examples[example_id], runs=runs, swapped=swapped))
    return pairs
