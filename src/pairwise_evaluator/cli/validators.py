"""Validation utilities for CLI arguments.

This module provides validation functions for CLI arguments
and output paths.
"""

import argparse
import tempfile
from pathlib import Path

__all__ = [
    "validate_args",
    "validate_output_path",
]


def validate_output_path(output_path: str) -> str | None:
    """Validate that output path is within safe boundaries.

    The path must be within the current working directory or the temp
    directory.

    Args:
        output_path: The output path to validate.

    Returns:
        Error message if validation fails, None if valid.

    """
    try:
        path = Path(output_path).resolve()
    except (OSError, RuntimeError) as e:
        return f"Error: Invalid output path '{output_path}': {e}"

    for root in (Path.cwd(), Path(tempfile.gettempdir())):
        if path.is_relative_to(root.resolve()):
            return None

    return (
        f"Error: Output path '{output_path}' must be within "
        "current directory or temp directory"
    )


def validate_args(args: argparse.Namespace) -> str | None:
    """Validate CLI arguments for consistency.

    A job comes either from --config (optionally overridden by flags) or
    entirely from flags, in which case --store, one of --compare and
    --evaluate, and at least one --evaluator are required.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Error message if validation fails, None if valid.

    """
    config = getattr(args, "config", None)
    if config is not None:
        config_path = Path(config)
        if not config_path.exists():
            return f"Error: Config file not found: {config}"
        if config_path.suffix not in (".yaml", ".yml"):
            return f"Error: Config file must be YAML: {config}"
    else:
        if not getattr(args, "compare", None) and not getattr(args, "evaluate", None):
            return "Error: one of --compare, --evaluate, or --config is required"
        if not getattr(args, "evaluators", None):
            return "Error: at least one --evaluator is required"
        if getattr(args, "store", None) is None:
            return "Error: --store is required"

    store = getattr(args, "store", None)
    if store is not None and not Path(store).is_dir():
        return f"Error: Store directory not found: {store}"

    output = getattr(args, "output", None)
    if output is not None:
        return validate_output_path(output)

    return None
