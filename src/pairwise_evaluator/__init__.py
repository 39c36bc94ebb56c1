"""pairwise-evaluator: pairwise and per-run evaluation of LLM experiments.

Compare the runs of two experiments over a shared dataset with pairwise
evaluators, or score the runs of one experiment with regular evaluators.
Feedback is written back through an EvaluationClient.
"""

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.comparative import (
    ComparativeEvaluationOrchestrator,
    ComparativeEvaluator,
    aevaluate_comparative,
    evaluate_comparative,
)
from pairwise_evaluator.evaluation import (
    RunEvaluator,
    aevaluate_existing,
    evaluate_existing,
)
from pairwise_evaluator.exceptions import PairwiseEvaluatorError
from pairwise_evaluator.processing import PayloadPipeline, create_anonymizer
from pairwise_evaluator.stores import InMemoryStore, JsonFileStore
from pairwise_evaluator.tracing import find_descendant, find_descendants

__version__ = "0.1.0"

__all__ = [
    "ComparativeEvaluationOrchestrator",
    "ComparativeEvaluator",
    "EvaluationClient",
    "InMemoryStore",
    "JsonFileStore",
    "PairwiseEvaluatorError",
    "PayloadPipeline",
    "RunEvaluator",
    "__version__",
    "aevaluate_comparative",
    "aevaluate_existing",
    "create_anonymizer",
    "evaluate_comparative",
    "evaluate_existing",
    "find_descendant",
    "find_descendants",
]
