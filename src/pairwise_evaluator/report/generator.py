"""Report generation for evaluation results.

This module renders comparative and per-run evaluation results as
terminal text or JSON files.
"""

from __future__ import annotations

from pathlib import Path

from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.results import (
    ComparativeExperimentResults,
    ExperimentEvaluationResults,
    JobFailure,
    KeyAggregate,
)

__all__ = ["ComparativeReportGenerator", "EvaluationReportGenerator"]

logger = get_logger(__name__)

_SEP = "=" * 60
_MAX_FAILURES_SHOWN = 10


class ComparativeReportGenerator:
    """Generates comparative evaluation reports in JSON and CLI formats."""

    def to_json(self, results: ComparativeExperimentResults, path: Path) -> Path:
        """Write comparative results as JSON.

        Args:
            results: The comparative results to serialize.
            path: Output file path.

        Returns:
            Path to the written file.

        Raises:
            OSError: If the file cannot be written.

        """
        path.write_text(results.model_dump_json(indent=2))
        logger.info("comparative_report_json_saved", path=str(path))
        return path

    def to_cli(self, results: ComparativeExperimentResults) -> str:
        """Format comparative results for terminal display.

        Args:
            results: The comparative results.

        Returns:
            Formatted string for terminal output.

        """
        exp_a, exp_b = results.experiments
        names = {exp_a.id: exp_a.name, exp_b.id: exp_b.name}
        summary = results.summary
        lines: list[str] = []

        lines.append(_SEP)
        lines.append(f"PAIRWISE EXPERIMENT: {results.comparative_experiment.name}")
        lines.append(f"Id: {results.experiment_id}")
        lines.append(f"A: {exp_a.name}  |  B: {exp_b.name}")
        lines.append(
            f"Common examples: {summary.common_examples} | "
            f"Jobs: {summary.total_jobs} | "
            f"Succeeded: {summary.succeeded} | "
            f"Failed: {summary.failed} | "
            f"Cancelled: {summary.cancelled}"
        )
        lines.append(_SEP)

        if summary.aggregates:
            lines.append("")
            lines.append("PREFERENCES:")
            lines.append(
                f"  {'Key':<24}{'N':>5}{'A wins':>8}{'B wins':>8}{'Ties':>6}"
                f"{'Mean A':>9}{'Mean B':>9}"
            )
            lines.append(
                f"  {'---':<24}{'-':>5}{'------':>8}{'------':>8}{'----':>6}"
                f"{'------':>9}{'------':>9}"
            )
            for agg in summary.aggregates:
                lines.append(_aggregate_row(agg, exp_a.id, exp_b.id))

            lines.append("")
            lines.append("SIGNIFICANCE:")
            for agg in summary.aggregates:
                lines.append(_significance_line(agg, names))

        if summary.presentation_order:
            po = summary.presentation_order
            lines.append("")
            bias = f", bias toward {po.detected_bias} position" if po.detected_bias else ""
            lines.append(
                f"Presentation order: first position won "
                f"{po.first_position_win_rate * 100:.0f}% of "
                f"{po.decided_pairs} decided pairs{bias}"
            )

        if results.failures:
            lines.append("")
            lines.extend(_failure_lines(results.failures))

        lines.append(_SEP)
        return "\n".join(lines)


class EvaluationReportGenerator:
    """Generates per-run evaluation reports in JSON and CLI formats."""

    def to_json(self, results: ExperimentEvaluationResults, path: Path) -> Path:
        """Write per-run evaluation results as JSON.

        Raises:
            OSError: If the file cannot be written.

        """
        path.write_text(results.model_dump_json(indent=2))
        logger.info("evaluation_report_json_saved", path=str(path))
        return path

    def to_cli(self, results: ExperimentEvaluationResults) -> str:
        """Format per-run evaluation results for terminal display."""
        summary = results.summary
        lines = [
            _SEP,
            f"EXPERIMENT: {results.experiment.name}",
            f"Runs: {summary.total_runs} | "
            f"Jobs: {summary.total_jobs} | "
            f"Succeeded: {summary.succeeded} | "
            f"Failed: {summary.failed} | "
            f"Cancelled: {summary.cancelled}",
            _SEP,
        ]

        if summary.aggregates:
            lines.append("")
            lines.append("SCORES:")
            lines.append(f"  {'Key':<24}{'N':>5}{'Mean':>9}")
            lines.append(f"  {'---':<24}{'-':>5}{'----':>9}")
            for agg in summary.aggregates:
                mean = f"{agg.mean_score:>9.3f}" if agg.mean_score is not None else f"{'N/A':>9}"
                lines.append(f"  {agg.key:<24}{agg.count:>5}{mean}")

        if results.failures:
            lines.append("")
            lines.extend(_failure_lines(results.failures))

        lines.append(_SEP)
        return "\n".join(lines)


def _aggregate_row(agg: KeyAggregate, exp_a_id: str, exp_b_id: str) -> str:
    mean_a = agg.mean_scores.get(exp_a_id)
    mean_b = agg.mean_scores.get(exp_b_id)
    return (
        f"  {agg.key:<24}{agg.count:>5}"
        f"{agg.wins.get(exp_a_id, 0):>8}{agg.wins.get(exp_b_id, 0):>8}{agg.ties:>6}"
        f"{_fmt(mean_a):>9}{_fmt(mean_b):>9}"
    )


def _significance_line(agg: KeyAggregate, names: dict[str, str]) -> str:
    if agg.p_value is None:
        return f"  {agg.key}: not enough non-tied examples for a test"
    preferred = names.get(agg.preferred_experiment_id or "", "neither")
    sig = "significant" if agg.p_value < 0.05 else "not significant"
    effect = f", d={agg.effect_size:.3f}" if agg.effect_size is not None else ""
    ci = ""
    if agg.confidence_interval is not None:
        low, high = agg.confidence_interval
        ci = f", CI=[{low:.3f}, {high:.3f}]"
    return f"  {agg.key}: prefers {preferred} (p={agg.p_value:.4f}, {sig}{effect}{ci})"


def _failure_lines(failures: list[JobFailure]) -> list[str]:
    lines = [f"FAILURES ({len(failures)}):"]
    for failure in failures[:_MAX_FAILURES_SHOWN]:
        lines.append(
            f"  [{failure.kind}] {failure.evaluator} "
            f"example={failure.example_id}: {failure.error_type}: {failure.error}"
        )
    if len(failures) > _MAX_FAILURES_SHOWN:
        lines.append(f"  ... and {len(failures) - _MAX_FAILURES_SHOWN} more")
    return lines


def _fmt(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.3f}"
