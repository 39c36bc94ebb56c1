"""Unit tests for YAML job configuration loading."""

from pathlib import Path

import pytest

from pairwise_evaluator.comparative import ComparativeEvaluator
from pairwise_evaluator.config import (
    ConfigurationError,
    import_evaluator,
    load_job_config,
)
from pairwise_evaluator.config.loader import load_yaml_file
from pairwise_evaluator.evaluation import RunEvaluator


def _write(tmp_path: Path, text: str, name: str = "job.yaml") -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


class TestLoadJobConfig:
    """Tests for load_job_config."""

    def test_compare_job(self, tmp_path: Path) -> None:
        """Test a comparison job with options."""
        path = _write(
            tmp_path,
            """
store: data
compare: [exp-A, exp-B]
evaluators:
  - "pairwise_evaluator.evaluators:exact_match_preference()"
randomize_order: true
max_concurrency: 8
seed: 3
""",
        )

        job = load_job_config(path)

        assert job.compare == ["exp-A", "exp-B"]
        assert job.evaluate is None
        assert job.randomize_order is True
        assert job.max_concurrency == 8
        assert job.seed == 3
        assert job.store == str(tmp_path / "data")

    def test_evaluate_job(self, tmp_path: Path) -> None:
        """Test a per-run job keeps an absolute store path."""
        path = _write(
            tmp_path,
            "store: /srv/store\nevaluate: exp-A\nevaluators: ['m:f']\n",
        )
        job = load_job_config(path)
        assert job.evaluate == "exp-A"
        assert job.store == "/srv/store"

    def test_both_modes_rejected(self, tmp_path: Path) -> None:
        """Test compare and evaluate are mutually exclusive."""
        path = _write(
            tmp_path, "compare: [a, b]\nevaluate: a\nevaluators: ['m:f']\n"
        )
        with pytest.raises(ConfigurationError, match="exactly one"):
            load_job_config(path)

    def test_compare_needs_two(self, tmp_path: Path) -> None:
        """Test compare must list two experiments."""
        path = _write(tmp_path, "compare: [a]\nevaluators: ['m:f']\n")
        with pytest.raises(ConfigurationError):
            load_job_config(path)

    def test_evaluators_required(self, tmp_path: Path) -> None:
        """Test at least one evaluator is required."""
        path = _write(tmp_path, "evaluate: a\nevaluators: []\n")
        with pytest.raises(ConfigurationError):
            load_job_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_job_config(tmp_path / "nope.yaml")


class TestLoadYamlFile:
    """Tests for load_yaml_file."""

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file is rejected."""
        with pytest.raises(ConfigurationError, match="Empty"):
            load_yaml_file(_write(tmp_path, ""))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """Test a list document is rejected."""
        with pytest.raises(ConfigurationError, match="expected mapping"):
            load_yaml_file(_write(tmp_path, "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML is rejected."""
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            load_yaml_file(_write(tmp_path, "a: [unclosed\n"))


class TestImportEvaluator:
    """Tests for import_evaluator."""

    def test_imports_attribute(self) -> None:
        """Test importing a callable attribute."""
        from pairwise_evaluator.evaluators import exact_match_preference

        assert import_evaluator("pairwise_evaluator.evaluators:exact_match_preference") is (
            exact_match_preference
        )

    def test_calls_factory(self) -> None:
        """Test a trailing () calls the factory."""
        evaluator = import_evaluator(
            "pairwise_evaluator.evaluators:exact_match_preference()"
        )
        assert isinstance(evaluator, ComparativeEvaluator)
        assert evaluator.name == "ranked_preference"

    def test_accepts_run_evaluator_instance(self, tmp_path: Path, monkeypatch) -> None:
        """Test a module-level RunEvaluator built by a factory is accepted."""
        (tmp_path / "job_evals.py").write_text(
            "from pairwise_evaluator.evaluators import intermediate_step_evaluator\n"
            "retrieve = intermediate_step_evaluator('retrieve', lambda s, e: 1, key='r')\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        evaluator = import_evaluator("job_evals:retrieve")

        assert isinstance(evaluator, RunEvaluator)

    def test_dotted_attribute(self) -> None:
        """Test nested attributes are resolved."""
        assert callable(import_evaluator("os:path.join"))

    @pytest.mark.parametrize(
        ("spec", "message"),
        [
            ("no_colon", "Invalid evaluator path"),
            ("missing_module_xyz:f", "Cannot import module"),
            ("os:does_not_exist", "has no attribute"),
            ("os:sep", "not callable"),
        ],
    )
    def test_errors(self, spec: str, message: str) -> None:
        """Test malformed and unresolvable paths."""
        with pytest.raises(ConfigurationError, match=message):
            import_evaluator(spec)
