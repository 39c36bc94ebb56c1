"""Terminal and JSON reports for evaluation results."""

from pairwise_evaluator.report.generator import (
    ComparativeReportGenerator,
    EvaluationReportGenerator,
)

__all__ = ["ComparativeReportGenerator", "EvaluationReportGenerator"]
