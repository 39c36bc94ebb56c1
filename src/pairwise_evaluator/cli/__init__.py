"""CLI package for pairwise-evaluator.

This package provides the command-line interface. It implements the
Command pattern for the two operations (compare, evaluate).
"""

from pairwise_evaluator.cli.commands import (
    BaseCommand,
    CommandResult,
    CompareCommand,
    EvaluateCommand,
)
from pairwise_evaluator.cli.main import CommandDispatcher, main
from pairwise_evaluator.cli.parser import create_parser
from pairwise_evaluator.cli.validators import validate_args, validate_output_path

__all__ = [
    "BaseCommand",
    "CommandDispatcher",
    "CommandResult",
    "CompareCommand",
    "EvaluateCommand",
    "create_parser",
    "main",
    "validate_args",
    "validate_output_path",
]
