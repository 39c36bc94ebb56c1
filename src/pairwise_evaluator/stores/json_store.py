"""JSON file backed store.

Directory layout::

    <root>/datasets/<dataset_id>.json        Dataset (with versions)
    <root>/experiments/<experiment_id>.json  {"experiment": {...}, "runs": [...]}
    <root>/comparative/<id>.json             ComparativeExperiment
    <root>/feedback.jsonl                    one EvaluationResult per line

Datasets and experiments are loaded once at construction. Feedback is
appended one line per record, and a batch in a single write, so
concurrent writers of distinct records never rewrite each other's data.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pairwise_evaluator.config.defaults import (
    DEFAULT_COMPARATIVE_DIRNAME,
    DEFAULT_FEEDBACK_FILENAME,
)
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Dataset
from pairwise_evaluator.models.experiment import ComparativeExperiment, Experiment
from pairwise_evaluator.models.feedback import EvaluationResult
from pairwise_evaluator.models.run import Run
from pairwise_evaluator.stores.exceptions import StorageError
from pairwise_evaluator.stores.memory import InMemoryStore

__all__ = ["JsonFileStore"]

logger = get_logger(__name__)


class JsonFileStore(InMemoryStore):
    """Loads records from a directory of JSON files and appends feedback.

    Attributes:
        root: Store directory.

    """

    def __init__(self, root: Path | str) -> None:
        super().__init__()
        self.root = Path(root)
        if not self.root.is_dir():
            raise StorageError(f"Store directory not found: {self.root}")
        self._load()

    @property
    def feedback_path(self) -> Path:
        return self.root / DEFAULT_FEEDBACK_FILENAME

    @property
    def comparative_dir(self) -> Path:
        return self.root / DEFAULT_COMPARATIVE_DIRNAME

    def _load(self) -> None:
        for path in sorted((self.root / "datasets").glob("*.json")):
            self.add_dataset(Dataset.model_validate(self._read_json(path)))

        for path in sorted((self.root / "experiments").glob("*.json")):
            data = self._read_json(path)
            if not isinstance(data, dict) or "experiment" not in data:
                raise StorageError(f"Experiment file {path} has no 'experiment' key")
            experiment = Experiment.model_validate(data["experiment"])
            runs = [Run.model_validate(r) for r in data.get("runs", [])]
            self.add_experiment(experiment, runs)

        for path in sorted(self.comparative_dir.glob("*.json")):
            super().create_comparative_experiment(
                ComparativeExperiment.model_validate(self._read_json(path))
            )

        if self.feedback_path.exists():
            try:
                with self.feedback_path.open("r", encoding="utf-8") as f:
                    for line_no, line in enumerate(f, 1):
                        if not line.strip():
                            continue
                        try:
                            feedback = EvaluationResult.model_validate_json(line)
                        except ValueError as e:
                            raise StorageError(
                                f"Invalid feedback record at {self.feedback_path}:{line_no}: {e}"
                            ) from e
                        super().create_feedback(feedback)
            except OSError as e:
                raise StorageError(f"Failed to read {self.feedback_path}: {e}") from e

        logger.info(
            "json_store_loaded",
            root=str(self.root),
            datasets=len(self._datasets),
            experiments=len(self._experiments),
            feedback=len(self._feedback),
        )

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Failed to parse {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def create_feedback(self, feedback: EvaluationResult) -> EvaluationResult:
        try:
            with self.feedback_path.open("a", encoding="utf-8") as f:
                f.write(feedback.model_dump_json() + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append feedback to {self.feedback_path}: {e}") from e
        return super().create_feedback(feedback)

    def create_feedback_batch(
        self, feedback: Sequence[EvaluationResult]
    ) -> list[EvaluationResult]:
        """Append every record with a single write call."""
        lines = "".join(record.model_dump_json() + "\n" for record in feedback)
        try:
            with self.feedback_path.open("a", encoding="utf-8") as f:
                f.write(lines)
        except OSError as e:
            raise StorageError(f"Failed to append feedback to {self.feedback_path}: {e}") from e
        return super().create_feedback_batch(feedback)

    def create_comparative_experiment(
        self, experiment: ComparativeExperiment
    ) -> ComparativeExperiment:
        self.comparative_dir.mkdir(parents=True, exist_ok=True)
        path = self.comparative_dir / f"{experiment.id}.json"
        try:
            path.write_text(experiment.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to save comparative experiment to {path}: {e}") from e

        logger.info(
            "comparative_experiment_saved",
            comparative_experiment_id=experiment.id,
            path=str(path),
        )
        return super().create_comparative_experiment(experiment)
