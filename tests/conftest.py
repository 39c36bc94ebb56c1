"""Pytest configuration and shared fixtures for the pairwise-evaluator test suite.

This module provides a small capitals dataset, two experiments run
against it, an in-memory store seeded with both, and a client with
explicit settings so tests never depend on the process environment.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.config.settings import (
    ComparativeSettings,
    JudgeSettings,
    Settings,
    TracingSettings,
)
from pairwise_evaluator.models import Dataset, DatasetVersion, Example, Experiment, Run
from pairwise_evaluator.processing.pipeline import PayloadPipeline
from pairwise_evaluator.stores.memory import InMemoryStore

T0 = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)

CAPITALS = {
    "ex-1": ("France", "Paris"),
    "ex-2": ("Italy", "Rome"),
    "ex-3": ("Spain", "Madrid"),
}


def make_example(example_id: str, country: str, capital: str) -> Example:
    """Create a capitals example."""
    return Example(
        id=example_id,
        dataset_id="ds-1",
        inputs={"question": f"What is the capital of {country}?"},
        outputs={"output": capital},
        metadata={"region": "europe"},
    )


def make_run(
    run_id: str,
    example_id: str | None,
    output: Any,
    *,
    children: list[Run] | None = None,
    offset_s: int = 0,
    name: str = "pipeline",
) -> Run:
    """Create a root run with an ``output`` value."""
    return Run(
        id=run_id,
        name=name,
        inputs={"example_id": example_id},
        outputs={"output": output},
        start_time=T0 + timedelta(seconds=offset_s),
        end_time=T0 + timedelta(seconds=offset_s + 1),
        reference_example_id=example_id,
        child_runs=children or [],
    )


@pytest.fixture
def settings() -> Settings:
    """Provide settings with explicit defaults, independent of env vars."""
    return Settings(
        comparative=ComparativeSettings(
            max_concurrency=5, randomize_order=False, load_nested=False
        ),
        tracing=TracingSettings(hide_inputs=False, hide_outputs=False),
        judge=JudgeSettings(),
    )


@pytest.fixture
def dataset() -> Dataset:
    """Provide the capitals dataset with a single version."""
    return Dataset(
        id="ds-1",
        name="capitals",
        versions=[
            DatasetVersion(
                version=1,
                as_of=T0,
                tags=["prod"],
                examples=[make_example(eid, *pair) for eid, pair in CAPITALS.items()],
            )
        ],
    )


@pytest.fixture
def experiment_a() -> Experiment:
    """Provide the baseline experiment."""
    return Experiment(id="exp-A", name="baseline", dataset_id="ds-1", dataset_version=1)


@pytest.fixture
def experiment_b() -> Experiment:
    """Provide the candidate experiment."""
    return Experiment(id="exp-B", name="candidate", dataset_id="ds-1", dataset_version=1)


@pytest.fixture
def store(dataset: Dataset, experiment_a: Experiment, experiment_b: Experiment) -> InMemoryStore:
    """Provide a store where A and B each answer all three examples.

    A answers Paris, Rome, Barcelona. B answers Lyon, Rome, Madrid.
    """
    memory = InMemoryStore()
    memory.add_dataset(dataset)
    memory.add_experiment(
        experiment_a,
        [
            make_run("run-a1", "ex-1", "Paris", offset_s=0),
            make_run("run-a2", "ex-2", "Rome", offset_s=1),
            make_run("run-a3", "ex-3", "Barcelona", offset_s=2),
        ],
    )
    memory.add_experiment(
        experiment_b,
        [
            make_run("run-b1", "ex-1", "Lyon", offset_s=0),
            make_run("run-b2", "ex-2", "Rome", offset_s=1),
            make_run("run-b3", "ex-3", "Madrid", offset_s=2),
        ],
    )
    return memory


@pytest.fixture
def client(store: InMemoryStore, settings: Settings) -> EvaluationClient:
    """Provide a client with an identity pipeline and explicit settings."""
    return EvaluationClient(store, pipeline=PayloadPipeline(), settings=settings)


@pytest.fixture
def run_factory():
    """Provide the root run builder to tests that seed their own stores."""
    return make_run


@pytest.fixture
def example_factory():
    """Provide the capitals example builder."""
    return make_example
