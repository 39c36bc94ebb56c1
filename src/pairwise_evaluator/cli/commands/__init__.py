"""CLI command implementations.

This module exports the command classes for the CLI.
"""

from pairwise_evaluator.cli.commands.base import (
    BaseCommand,
    CommandResult,
    build_job_config,
)
from pairwise_evaluator.cli.commands.compare import CompareCommand
from pairwise_evaluator.cli.commands.evaluate import EvaluateCommand

__all__ = [
    "BaseCommand",
    "CommandResult",
    "CompareCommand",
    "EvaluateCommand",
    "build_job_config",
]
