"""CLI argument parser configuration.

This module provides the argument parser for the pairwise-evaluator CLI.
"""

import argparse

from pairwise_evaluator import __version__
from pairwise_evaluator.config.defaults import MAX_CONCURRENCY_MAX, MAX_CONCURRENCY_MIN

__all__ = ["create_parser"]


def _concurrency(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from e
    if not MAX_CONCURRENCY_MIN <= parsed <= MAX_CONCURRENCY_MAX:
        raise argparse.ArgumentTypeError(
            f"must be between {MAX_CONCURRENCY_MIN} and {MAX_CONCURRENCY_MAX}"
        )
    return parsed


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        An ArgumentParser configured with all CLI options.

    """
    parser = argparse.ArgumentParser(
        prog="pairwise-evaluator",
        description=(
            "Pairwise Evaluator - Compare two experiments over a shared dataset "
            "or score the runs of one experiment."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare two experiments with the built-in exact-match evaluator
  pairwise-evaluator --store ./data --compare exp-A exp-B \\
      --evaluator "pairwise_evaluator.evaluators:exact_match_preference()"

  # Shuffle the presentation order and write the results as JSON
  pairwise-evaluator --store ./data --compare exp-A exp-B \\
      --evaluator mypkg.evals:prefer_shorter --randomize-order --output results.json

  # Score each run of one experiment
  pairwise-evaluator --store ./data --evaluate exp-A --evaluator mypkg.evals:retrieval_recall

  # Run a job described in a YAML file
  pairwise-evaluator --config jobs/compare.yaml --verbose
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--store",
        type=str,
        metavar="DIR",
        help="Directory of the JSON file store (datasets/, experiments/, feedback.jsonl).",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--compare",
        nargs=2,
        metavar=("EXP_A", "EXP_B"),
        help="Compare two experiments (ids or names) over their shared dataset.",
    )
    mode.add_argument(
        "--evaluate",
        type=str,
        metavar="EXP",
        help="Score every run of one experiment with regular evaluators.",
    )

    parser.add_argument(
        "--evaluator",
        dest="evaluators",
        action="append",
        metavar="MODULE:ATTR",
        help=(
            "Evaluator import path. Repeat for several evaluators. "
            "A trailing () calls a factory with no arguments."
        ),
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE",
        help="YAML job file. Command-line options override its values.",
    )

    parser.add_argument(
        "--randomize-order",
        action="store_true",
        default=None,
        help="Shuffle the order of the two runs once per example.",
    )

    parser.add_argument(
        "--max-concurrency",
        type=_concurrency,
        metavar="N",
        help="Maximum evaluator calls in flight (default from settings).",
    )

    parser.add_argument(
        "--load-nested",
        action="store_true",
        default=None,
        help="Load full run trees instead of root runs only.",
    )

    parser.add_argument(
        "--prefix",
        dest="experiment_prefix",
        type=str,
        help="Name prefix of the created pairwise experiment.",
    )

    parser.add_argument(
        "--description",
        type=str,
        help="Description of the created pairwise experiment.",
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the presentation order shuffling.",
    )

    parser.add_argument(
        "--output",
        type=str,
        metavar="FILE",
        help="Write the full results as JSON to this file.",
    )

    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print results as JSON instead of a text summary.",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output.",
    )

    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write log lines to stderr as JSON.",
    )

    return parser
