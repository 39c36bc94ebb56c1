"""Payload processing applied before anything is persisted."""

from pairwise_evaluator.processing.anonymizer import (
    Anonymizer,
    ReplacementRule,
    create_anonymizer,
)
from pairwise_evaluator.processing.pipeline import PayloadPipeline

__all__ = ["Anonymizer", "PayloadPipeline", "ReplacementRule", "create_anonymizer"]
