"""Data models shared across pairwise-evaluator."""

from pairwise_evaluator.models.base import BaseSchema, FrozenSchema
from pairwise_evaluator.models.dataset import Dataset, DatasetVersion, Example
from pairwise_evaluator.models.experiment import (
    ComparativeExperiment,
    Experiment,
    ExperimentRef,
)
from pairwise_evaluator.models.feedback import (
    ComparativeScore,
    EvaluationResult,
    EvaluatorOutput,
    MultiScore,
    RunEvaluatorOutput,
    Score,
    SingleScore,
    evaluator_output_adapter,
)
from pairwise_evaluator.models.judge import ComparisonVerdict, JudgeVerdict
from pairwise_evaluator.models.results import (
    ComparativeExperimentResults,
    ComparativeSummary,
    EvaluationSummary,
    ExperimentEvaluationResults,
    JobFailure,
    KeyAggregate,
    PairResult,
    PresentationOrderAnalysis,
    RunKeyAggregate,
    RunResult,
)
from pairwise_evaluator.models.run import Run, RunStatus

__all__ = [
    # base.py
    "BaseSchema",
    "FrozenSchema",
    # dataset.py
    "Dataset",
    "DatasetVersion",
    "Example",
    # experiment.py
    "ComparativeExperiment",
    "Experiment",
    "ExperimentRef",
    # feedback.py
    "ComparativeScore",
    "EvaluationResult",
    "EvaluatorOutput",
    "MultiScore",
    "RunEvaluatorOutput",
    "Score",
    "SingleScore",
    "evaluator_output_adapter",
    # judge.py
    "ComparisonVerdict",
    "JudgeVerdict",
    # results.py
    "ComparativeExperimentResults",
    "ComparativeSummary",
    "EvaluationSummary",
    "ExperimentEvaluationResults",
    "JobFailure",
    "KeyAggregate",
    "PairResult",
    "PresentationOrderAnalysis",
    "RunKeyAggregate",
    "RunResult",
    # run.py
    "Run",
    "RunStatus",
]
