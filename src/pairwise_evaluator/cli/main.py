"""CLI main entry point.

This module provides the main entry point for the pairwise-evaluator CLI.
"""

import argparse
import asyncio
import sys
import traceback

from pairwise_evaluator.cli.commands import (
    CompareCommand,
    EvaluateCommand,
    build_job_config,
)
from pairwise_evaluator.cli.parser import create_parser
from pairwise_evaluator.cli.validators import validate_args
from pairwise_evaluator.exceptions import PairwiseEvaluatorError
from pairwise_evaluator.logging_config import configure_logging, get_logger

__all__ = ["main", "CommandDispatcher"]

logger = get_logger(__name__)


class CommandDispatcher:
    """Dispatches CLI commands to appropriate handlers.

    Attributes:
        _compare_cmd: Command handler for comparing two experiments.
        _evaluate_cmd: Command handler for scoring one experiment.

    """

    def __init__(self) -> None:
        """Initialize the command dispatcher with all command handlers."""
        self._compare_cmd = CompareCommand()
        self._evaluate_cmd = EvaluateCommand()

    async def dispatch(self, args: argparse.Namespace) -> int:
        """Dispatch to the appropriate command based on arguments.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code (0 for success, non-zero for errors).

        """
        job = build_job_config(args)
        command = self._compare_cmd if job.compare else self._evaluate_cmd
        logger.debug("command_dispatched", command=command.name)

        result = await command.execute(job, args)
        if result.output:
            print(result.output)
        if result.message:
            print(result.message, file=sys.stderr)
        return result.exit_code


def main(argv: list[str] | None = None) -> int:
    """Run the CLI application.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).

    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=getattr(args, "verbose", False),
        json_output=getattr(args, "log_json", False),
    )

    error = validate_args(args)
    if error:
        print(error, file=sys.stderr)
        return 1

    try:
        dispatcher = CommandDispatcher()
        return asyncio.run(dispatcher.dispatch(args))

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    except (PairwiseEvaluatorError, FileNotFoundError, ValueError) as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        if getattr(args, "verbose", False):
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
