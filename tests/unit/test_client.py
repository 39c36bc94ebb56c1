"""Unit tests for the evaluation client."""

from datetime import datetime

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.config.settings import Settings
from pairwise_evaluator.processing import PayloadPipeline, create_anonymizer
from pairwise_evaluator.stores import InMemoryStore


class TestEvaluationClient:
    """Tests for reads and pipeline-processed writes."""

    def test_read_examples_keyed_by_id(self, client: EvaluationClient) -> None:
        """Test fetching several examples at once."""
        examples = client.read_examples("ds-1", ["ex-1", "ex-3"])
        assert set(examples) == {"ex-1", "ex-3"}
        assert examples["ex-1"].outputs == {"output": "Paris"}

    def test_create_feedback(self, client: EvaluationClient, store: InMemoryStore) -> None:
        """Test feedback gets a fresh id and is stored."""
        first = client.create_feedback("run-a1", "correct", 1, comment="ok")
        second = client.create_feedback("run-a1", "correct", 0)

        assert first.id != second.id
        assert [fb.id for fb in store.list_feedback(run_ids=["run-a1"])] == [
            first.id,
            second.id,
        ]

    def test_correction_passes_through_pipeline(
        self, store: InMemoryStore, settings: Settings
    ) -> None:
        """Test corrections and mapping values are anonymized before storage."""
        client = EvaluationClient(
            store,
            pipeline=PayloadPipeline(anonymizer=create_anonymizer([("Paris", "<city>")])),
            settings=settings,
        )
        feedback = client.create_feedback(
            "run-a1",
            "correct",
            1,
            value={"answer": "Paris"},
            correction={"output": "Paris, France"},
        )
        assert feedback.correction == {"output": "<city>, France"}
        assert feedback.value == {"answer": "<city>"}

    def test_hidden_outputs(self, store: InMemoryStore, settings: Settings) -> None:
        """Test hide_outputs empties persisted corrections."""
        client = EvaluationClient(
            store, pipeline=PayloadPipeline(hide_outputs=True), settings=settings
        )
        feedback = client.create_feedback("run-a1", "k", 1, correction={"output": "x"})
        assert feedback.correction == {}

    def test_create_comparative_experiment(self, client: EvaluationClient) -> None:
        """Test the record references both experiments and their dataset."""
        exp_a = client.read_experiment("exp-A")
        exp_b = client.read_experiment("exp-B")

        created = client.create_comparative_experiment(
            "baseline vs. candidate-0000aaaa", [exp_a, exp_b], metadata={"a": 1}
        )

        assert created.experiment_ids == ["exp-A", "exp-B"]
        assert created.reference_dataset_id == "ds-1"
        assert client.store.read_comparative_experiment(created.id) == created

    def test_default_pipeline_from_settings(self, store: InMemoryStore) -> None:
        """Test the client builds its pipeline from tracing settings."""
        client = EvaluationClient(store, settings=Settings())
        assert client.pipeline.process_outputs({"a": 1}) is not None

    def test_comment_and_snapshot_pass_through_pipeline(
        self, store: InMemoryStore, settings: Settings
    ) -> None:
        """Test comments are anonymized and run snapshots follow the hide flags."""
        client = EvaluationClient(
            store,
            pipeline=PayloadPipeline(
                anonymizer=create_anonymizer([("Paris", "<city>")]), hide_outputs=True
            ),
            settings=settings,
        )
        feedback = client.create_feedback(
            "run-a1",
            "correct",
            1,
            value="Paris",
            comment="answered Paris",
            inputs={"question": "capital of France, Paris?"},
            outputs={"output": "Paris"},
        )
        assert feedback.value == "<city>"
        assert feedback.comment == "answered <city>"
        assert feedback.inputs == {"question": "capital of France, <city>?"}
        assert feedback.outputs == {}

    def test_create_feedback_batch(self, client: EvaluationClient, store: InMemoryStore) -> None:
        """Test built records are only stored once the batch is written."""
        records = [
            client.build_feedback("run-a1", "pref", 1),
            client.build_feedback("run-b1", "pref", 0),
        ]
        assert store.list_feedback() == []

        written = client.create_feedback_batch(records)

        assert [fb.run_id for fb in written] == ["run-a1", "run-b1"]
        assert store.list_feedback() == records

    def test_list_examples_naive_as_of(self, client: EvaluationClient) -> None:
        """Test a naive timestamp selects versions as if it were UTC."""
        examples = list(client.list_examples("ds-1", as_of=datetime(2027, 1, 1)))
        assert {e.id for e in examples} == {"ex-1", "ex-2", "ex-3"}
