"""Unit tests for the comparative evaluation orchestrator."""

import asyncio
import re

import pytest

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.comparative import (
    ComparativeEvaluationOrchestrator,
    DatasetMismatchError,
    aevaluate_comparative,
    evaluate_comparative,
)
from pairwise_evaluator.config.settings import Settings
from pairwise_evaluator.evaluators import exact_match_preference
from pairwise_evaluator.models import (
    ComparativeScore,
    Dataset,
    DatasetVersion,
    EvaluationResult,
    Experiment,
)
from pairwise_evaluator.processing import PayloadPipeline, create_anonymizer
from pairwise_evaluator.stores import InMemoryStore, NotFoundError, StorageError


def prefer_first(runs, example):
    """Prefer whichever run is presented first."""
    return ComparativeScore(key="first", scores={runs[0].id: 1, runs[1].id: 0})


def _client(store: InMemoryStore, settings: Settings) -> EvaluationClient:
    return EvaluationClient(store, pipeline=PayloadPipeline(), settings=settings)


def _large_client(settings: Settings, example_factory, run_factory, n: int) -> EvaluationClient:
    """Create a client over n examples answered by two experiments."""
    memory = InMemoryStore()
    memory.add_dataset(
        Dataset(
            id="ds-1",
            name="big",
            versions=[
                DatasetVersion(
                    version=1,
                    examples=[example_factory(f"ex-{i}", "X", "Y") for i in range(n)],
                )
            ],
        )
    )
    for exp_id in ("exp-A", "exp-B"):
        memory.add_experiment(
            Experiment(id=exp_id, name=exp_id, dataset_id="ds-1"),
            [run_factory(f"{exp_id}-{i}", f"ex-{i}", "Y") for i in range(n)],
        )
    return _client(memory, settings)


class TestComparativeEvaluation:
    """Tests for the end-to-end comparative flow."""

    @pytest.mark.asyncio
    async def test_exact_match_scores_paris_over_lyon(
        self, client: EvaluationClient, store: InMemoryStore
    ) -> None:
        """Test exp-A (Paris) beats exp-B (Lyon) against the reference Paris."""
        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [exact_match_preference()], client=client
        )

        (paris,) = results.feedback_for_example("ex-1")
        assert paris.result.key == "ranked_preference"
        assert paris.result.scores == {"run-a1": 1, "run-b1": 0}

        stored = {
            fb.run_id: fb.score
            for fb in store.list_feedback(comparative_experiment_id=results.experiment_id)
            if fb.evaluator_info["example_id"] == "ex-1"
        }
        assert stored == {"run-a1": 1, "run-b1": 0}

    @pytest.mark.asyncio
    async def test_n_examples_times_m_evaluators(self, client: EvaluationClient) -> None:
        """Test every evaluator sees every common example with exactly its two runs."""
        calls: list[tuple[str, frozenset[str]]] = []

        def recorder(name: str):
            def evaluate(runs, example):
                calls.append((example.id, frozenset(run.id for run in runs)))
                return {"key": name, "scores": {run.id: 0.5 for run in runs}}

            evaluate.__name__ = name
            return evaluate

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [recorder("one"), recorder("two")], client=client
        )

        assert len(calls) == 6
        assert results.summary.common_examples == 3
        assert results.summary.total_jobs == 6
        assert results.summary.succeeded == 6
        for example_id, run_ids in calls:
            suffix = example_id[-1]
            assert run_ids == {f"run-a{suffix}", f"run-b{suffix}"}
        for result in results.results:
            assert set(result.result.scores) == set(result.run_ids)
            assert len(result.feedback_ids) == 2

    @pytest.mark.asyncio
    async def test_results_are_ordered_by_example_then_evaluator(
        self, client: EvaluationClient
    ) -> None:
        """Test result order follows examples, then evaluator order."""

        async def slow_first(runs, example):
            await asyncio.sleep(0.01 if example.id == "ex-1" else 0)
            return prefer_first(runs, example)

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [slow_first, prefer_first], client=client
        )
        assert [(r.example_id, r.evaluator) for r in results.results] == [
            ("ex-1", "slow_first"),
            ("ex-1", "prefer_first"),
            ("ex-2", "slow_first"),
            ("ex-2", "prefer_first"),
            ("ex-3", "slow_first"),
            ("ex-3", "prefer_first"),
        ]

    @pytest.mark.asyncio
    async def test_each_call_creates_new_experiment(self, client: EvaluationClient) -> None:
        """Test re-running creates an independent pairwise experiment."""
        first = await aevaluate_comparative(
            ["exp-A", "exp-B"], [prefer_first], client=client
        )
        second = await aevaluate_comparative(
            ["exp-A", "exp-B"], [prefer_first], client=client
        )

        assert first.experiment_id != second.experiment_id
        assert re.fullmatch(
            r"baseline vs\. candidate-[0-9a-f]{8}", first.comparative_experiment.name
        )
        assert len(client.store.list_feedback(comparative_experiment_id=first.experiment_id)) == 6
        assert len(client.store.list_feedback(comparative_experiment_id=second.experiment_id)) == 6

    @pytest.mark.asyncio
    async def test_prefix_description_and_metadata(self, client: EvaluationClient) -> None:
        """Test naming options and recorded metadata."""
        results = await aevaluate_comparative(
            ["exp-A", "exp-B"],
            [prefer_first],
            client=client,
            experiment_prefix="nightly",
            description="capitals check",
            metadata={"team": "eval"},
        )

        comparative = results.comparative_experiment
        assert comparative.name.startswith("nightly-")
        assert comparative.description == "capitals check"
        assert comparative.experiment_ids == ["exp-A", "exp-B"]
        assert comparative.reference_dataset_id == "ds-1"
        assert comparative.metadata["team"] == "eval"
        assert comparative.metadata["evaluators"] == ["prefer_first"]
        assert comparative.metadata["randomize_order"] is False

    @pytest.mark.asyncio
    async def test_zero_common_examples(
        self, store: InMemoryStore, settings: Settings, run_factory
    ) -> None:
        """Test disjoint experiments give an empty result, not an error."""
        store.add_experiment(
            Experiment(id="exp-C", name="other", dataset_id="ds-1"),
            [run_factory("run-c9", "ex-9", "x")],
        )

        results = await aevaluate_comparative(
            ["exp-A", "exp-C"], [prefer_first], client=_client(store, settings)
        )

        assert results.results == []
        assert results.failures == []
        assert results.summary.common_examples == 0
        assert results.summary.total_jobs == 0
        assert results.summary.aggregates == []
        assert store.read_comparative_experiment(results.experiment_id)

    @pytest.mark.asyncio
    async def test_randomized_order_is_shared_by_evaluators(
        self, settings: Settings, example_factory, run_factory
    ) -> None:
        """Test shuffling happens once per example with balanced frequency."""
        client = _large_client(settings, example_factory, run_factory, 200)
        orders: dict[str, set[tuple[str, ...]]] = {}

        def record(runs, example):
            orders.setdefault(example.id, set()).add(tuple(run.id for run in runs))
            return {"key": "k", "scores": {run.id: 0 for run in runs}}

        def record_too(runs, example):
            return record(runs, example)

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"],
            [record, record_too],
            client=client,
            randomize_order=True,
            seed=11,
        )

        assert all(len(seen) == 1 for seen in orders.values())
        first_is_b = sum(
            1 for seen in orders.values() if next(iter(seen))[0].startswith("exp-B")
        )
        assert 70 < first_is_b < 130
        swapped = {r.example_id for r in results.results if r.swapped}
        assert len(swapped) == first_is_b

    @pytest.mark.asyncio
    async def test_source_runs_not_mutated(
        self, client: EvaluationClient, store: InMemoryStore
    ) -> None:
        """Test evaluation leaves experiments and runs untouched."""
        before = [run.model_dump() for run in store.list_runs("exp-A", load_nested=True)]
        await aevaluate_comparative(
            ["exp-A", "exp-B"], [exact_match_preference()], client=client, randomize_order=True
        )
        after = [run.model_dump() for run in store.list_runs("exp-A", load_nested=True)]
        assert before == after

    @pytest.mark.asyncio
    async def test_feedback_evaluator_info(
        self, client: EvaluationClient, store: InMemoryStore
    ) -> None:
        """Test feedback records the evaluator, example, and position."""
        results = await aevaluate_comparative(
            ["baseline", "candidate"], [prefer_first], client=client
        )
        feedback = store.list_feedback(run_ids=["run-b2"])
        assert len(feedback) == 1
        assert feedback[0].comparative_experiment_id == results.experiment_id
        assert feedback[0].evaluator_info == {
            "evaluator": "prefer_first",
            "example_id": "ex-2",
            "presentation_index": 1,
        }
        assert feedback[0].score == 0

    @pytest.mark.asyncio
    async def test_summary_aggregates(self, client: EvaluationClient) -> None:
        """Test the exact-match summary prefers neither on a 1-1-1 split."""
        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [exact_match_preference()], client=client
        )

        (agg,) = results.summary.aggregates
        assert agg.wins == {"exp-A": 1, "exp-B": 1}
        assert agg.ties == 1
        assert agg.preferred_experiment_id is None
        assert results.summary.presentation_order is None

    def test_sync_entry_point(self, client: EvaluationClient) -> None:
        """Test evaluate_comparative runs outside an event loop."""
        results = evaluate_comparative(["exp-A", "exp-B"], [prefer_first], client=client)
        assert results.summary.succeeded == 3


class TestFailureIsolation:
    """Tests for per-job failures."""

    @pytest.mark.asyncio
    async def test_evaluator_error_does_not_abort(self, client: EvaluationClient) -> None:
        """Test a raising evaluator yields failures while others succeed."""

        def flaky(runs, example):
            if example.id == "ex-2":
                raise TimeoutError("judge timed out")
            return prefer_first(runs, example)

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [flaky, prefer_first], client=client
        )

        assert results.summary.succeeded == 5
        assert results.summary.failed == 1
        (failure,) = results.failures
        assert failure.kind == "evaluator_error"
        assert failure.example_id == "ex-2"
        assert failure.error_type == "TimeoutError"
        assert set(failure.run_ids) == {"run-a2", "run-b2"}

    @pytest.mark.asyncio
    async def test_contract_violation(self, client: EvaluationClient) -> None:
        """Test a result missing a run id is recorded as a contract violation."""

        def one_sided(runs, example):
            return {"key": "k", "scores": {runs[0].id: 1}}

        results = await aevaluate_comparative(["exp-A", "exp-B"], [one_sided], client=client)

        assert results.summary.failed == 3
        assert {f.kind for f in results.failures} == {"contract_violation"}
        assert client.store.list_feedback() == []

    @pytest.mark.asyncio
    async def test_persistence_error(self, store: InMemoryStore, settings: Settings) -> None:
        """Test a feedback write failure is recorded for that job."""

        class FailingStore(InMemoryStore):
            def create_feedback_batch(self, feedback):
                raise StorageError("disk full")

        failing = FailingStore()
        failing.add_dataset(store.read_dataset("ds-1"))
        for exp_id in ("exp-A", "exp-B"):
            failing.add_experiment(store.read_experiment(exp_id), store.list_runs(exp_id))

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [prefer_first], client=_client(failing, settings)
        )

        assert results.summary.failed == 3
        assert {f.kind for f in results.failures} == {"persistence_error"}
        assert {f.error_type for f in results.failures} == {"StorageError"}

    @pytest.mark.asyncio
    async def test_failed_pair_write_leaves_no_feedback(
        self, store: InMemoryStore, settings: Settings
    ) -> None:
        """Test a pair is stored whole or not at all."""

        class SecondRecordFails(InMemoryStore):
            def create_feedback(self, feedback: EvaluationResult) -> EvaluationResult:
                raise AssertionError("pairs must be written as one batch")

            def create_feedback_batch(self, feedback):
                if feedback[0].evaluator_info["example_id"] == "ex-2":
                    raise StorageError(f"failed writing {feedback[1].run_id}")
                return super().create_feedback_batch(feedback)

        failing = SecondRecordFails()
        failing.add_dataset(store.read_dataset("ds-1"))
        for exp_id in ("exp-A", "exp-B"):
            failing.add_experiment(store.read_experiment(exp_id), store.list_runs(exp_id))

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [prefer_first], client=_client(failing, settings)
        )

        (failure,) = results.failures
        assert failure.example_id == "ex-2"
        assert failure.kind == "persistence_error"
        assert failing.list_feedback(run_ids=["run-a2", "run-b2"]) == []
        assert len(failing.list_feedback()) == 4
        assert sum(len(r.feedback_ids) for r in results.results) == 4


class TestResolution:
    """Tests for fatal resolution errors."""

    @pytest.mark.asyncio
    async def test_requires_two_experiments(self, client: EvaluationClient) -> None:
        """Test anything other than two experiments is rejected."""
        with pytest.raises(ValueError, match="exactly two"):
            await aevaluate_comparative(["exp-A"], [prefer_first], client=client)

    def test_requires_evaluators(self, client: EvaluationClient) -> None:
        """Test an empty evaluator list is rejected."""
        with pytest.raises(ValueError):
            ComparativeEvaluationOrchestrator(client, [])

    @pytest.mark.asyncio
    async def test_unknown_experiment(self, client: EvaluationClient) -> None:
        """Test an unknown experiment raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await aevaluate_comparative(["exp-A", "ghost"], [prefer_first], client=client)

    @pytest.mark.asyncio
    async def test_dataset_mismatch(self, client: EvaluationClient, store: InMemoryStore) -> None:
        """Test experiments over different datasets are rejected."""
        store.add_experiment(Experiment(id="exp-D", name="elsewhere", dataset_id="ds-2"))

        with pytest.raises(DatasetMismatchError) as exc_info:
            await aevaluate_comparative(["exp-A", "exp-D"], [prefer_first], client=client)
        assert "ds-2" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_example_missing_from_dataset(
        self, client: EvaluationClient, store: InMemoryStore, run_factory
    ) -> None:
        """Test a shared example absent from every dataset version is fatal."""
        for exp_id, run_id in (("exp-E", "run-e"), ("exp-F", "run-f")):
            store.add_experiment(
                Experiment(id=exp_id, name=exp_id, dataset_id="ds-1"),
                [run_factory(run_id, "ex-gone", "x")],
            )
        with pytest.raises(NotFoundError, match="ex-gone"):
            await aevaluate_comparative(["exp-E", "exp-F"], [prefer_first], client=client)


class TestConcurrency:
    """Tests for bounded concurrency and cancellation."""

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_in_flight(
        self, settings: Settings, example_factory, run_factory
    ) -> None:
        """Test no more than max_concurrency evaluator calls overlap."""
        client = _large_client(settings, example_factory, run_factory, 12)
        running = 0
        peak = 0

        async def slow(runs, example):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return prefer_first(runs, example)

        results = await aevaluate_comparative(
            ["exp-A", "exp-B"], [slow], client=client, max_concurrency=3
        )

        assert peak == 3
        assert results.summary.succeeded == 12

    @pytest.mark.asyncio
    async def test_sync_evaluators_do_not_block_loop(
        self, settings: Settings, example_factory, run_factory
    ) -> None:
        """Test blocking sync evaluators overlap through worker threads."""
        import threading
        import time

        client = _large_client(settings, example_factory, run_factory, 4)
        lock = threading.Lock()
        running = 0
        peak = 0

        def blocking(runs, example):
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.05)
            with lock:
                running -= 1
            return prefer_first(runs, example)

        await aevaluate_comparative(
            ["exp-A", "exp-B"], [blocking], client=client, max_concurrency=4
        )
        assert peak > 1

    @pytest.mark.asyncio
    async def test_cancel_counts_unstarted_jobs(self, client: EvaluationClient) -> None:
        """Test cancelled jobs are reported, not silently dropped."""
        orchestrator: ComparativeEvaluationOrchestrator

        def cancel_after_first(runs, example):
            orchestrator.cancel()
            return prefer_first(runs, example)

        orchestrator = ComparativeEvaluationOrchestrator(
            client, [cancel_after_first], max_concurrency=1
        )
        results = await orchestrator.arun(["exp-A", "exp-B"])

        assert results.summary.succeeded == 1
        assert results.summary.cancelled == 2
        assert results.summary.total_jobs == 3

    @pytest.mark.asyncio
    async def test_orchestrator_reusable_after_cancel(self, client: EvaluationClient) -> None:
        """Test a cancellation only affects the run it was issued in."""
        orchestrator: ComparativeEvaluationOrchestrator
        cancel_next = True

        def cancel_once(runs, example):
            nonlocal cancel_next
            if cancel_next:
                cancel_next = False
                orchestrator.cancel()
            return prefer_first(runs, example)

        orchestrator = ComparativeEvaluationOrchestrator(
            client, [cancel_once], max_concurrency=1
        )
        first = await orchestrator.arun(["exp-A", "exp-B"])
        second = await orchestrator.arun(["exp-A", "exp-B"])

        assert first.summary.cancelled == 2
        assert second.summary.succeeded == 3
        assert second.summary.cancelled == 0

    def test_cancel_without_active_run(self, client: EvaluationClient) -> None:
        """Test cancel() outside a run does not affect the next run."""
        orchestrator = ComparativeEvaluationOrchestrator(client, [prefer_first])
        orchestrator.cancel()
        assert orchestrator.run(["exp-A", "exp-B"]).summary.succeeded == 3

    def test_options_fall_back_to_settings(self, store: InMemoryStore) -> None:
        """Test unset options use the client's comparative settings."""
        from pairwise_evaluator.config.settings import ComparativeSettings

        settings = Settings(
            comparative=ComparativeSettings(
                max_concurrency=7, randomize_order=True, load_nested=True
            )
        )
        orchestrator = ComparativeEvaluationOrchestrator(
            _client(store, settings), [prefer_first]
        )

        assert orchestrator.max_concurrency == 7
        assert orchestrator.randomize_order is True
        assert orchestrator.load_nested is True


class TestPayloadProcessing:
    """Tests for the payload pipeline on persisted comparative feedback."""

    @pytest.mark.asyncio
    async def test_comment_anonymized_and_outputs_hidden(
        self, store: InMemoryStore, settings: Settings
    ) -> None:
        """Test judge comments are redacted and hidden outputs are not stored."""

        def chatty_judge(runs, example):
            return {
                "key": "pref",
                "scores": {runs[0].id: 1, runs[1].id: 0},
                "comment": "user email bob@example.com asked about France",
            }

        client = EvaluationClient(
            store,
            pipeline=PayloadPipeline(
                anonymizer=create_anonymizer([(r"\S+@\S+", "<email>"), ("France", "<country>")]),
                hide_outputs=True,
            ),
            settings=settings,
        )

        results = await aevaluate_comparative(["exp-A", "exp-B"], [chatty_judge], client=client)

        feedback = store.list_feedback(comparative_experiment_id=results.experiment_id)
        assert len(feedback) == 6
        assert {fb.comment for fb in feedback} == {"user email <email> asked about <country>"}
        assert all(fb.outputs == {} for fb in feedback)
        (a1,) = [fb for fb in feedback if fb.run_id == "run-a1"]
        assert a1.inputs == {"example_id": "ex-1"}

    @pytest.mark.asyncio
    async def test_run_snapshot_without_pipeline(self, client: EvaluationClient) -> None:
        """Test each record carries its own run's inputs and outputs."""
        results = await aevaluate_comparative(["exp-A", "exp-B"], [prefer_first], client=client)

        feedback = client.store.list_feedback(comparative_experiment_id=results.experiment_id)
        snapshots = {fb.run_id: fb.outputs for fb in feedback}
        assert snapshots["run-a1"] == {"output": "Paris"}
        assert snapshots["run-b1"] == {"output": "Lyon"}
