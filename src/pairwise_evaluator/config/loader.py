"""YAML job configuration loader and evaluator import helper."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import yaml

from pairwise_evaluator.config.exceptions import ConfigurationError
from pairwise_evaluator.config.models import JobConfig
from pairwise_evaluator.logging_config import get_logger

__all__ = ["import_evaluator", "load_job_config", "load_yaml_file"]

logger = get_logger(__name__)


def load_yaml_file(path: Path, label: str = "File") -> dict[str, Any]:
    """Load a YAML file that must contain a mapping.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is empty, invalid, or not a mapping.

    """
    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e

    if data is None:
        raise ConfigurationError(f"Empty YAML file: {path}")
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid YAML structure: expected mapping, got {type(data).__name__}"
        )
    return data


def load_job_config(path: Path | str) -> JobConfig:
    """Load and validate a job configuration from YAML.

    Relative store paths are resolved against the config file's directory.

    Raises:
        ConfigurationError: If the file is invalid or validation fails.
        FileNotFoundError: If the file does not exist.

    """
    path = Path(path)
    data = load_yaml_file(path, label="Job config")

    try:
        config = JobConfig.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"Job config validation failed: {e}") from e

    if config.store is not None and not Path(config.store).is_absolute():
        config = config.model_copy(update={"store": str(path.parent / config.store)})

    logger.info(
        "job_config_loaded",
        path=str(path),
        mode="compare" if config.compare else "evaluate",
        evaluators=len(config.evaluators),
    )
    return config


def import_evaluator(spec: str) -> Any:
    """Import an evaluator from a ``package.module:attribute`` path.

    A trailing ``()`` calls the imported object with no arguments, which
    lets a path name an evaluator factory such as
    ``pairwise_evaluator.evaluators:exact_match_preference()``.

    Raises:
        ConfigurationError: If the path is malformed or cannot be imported.

    """
    factory = spec.endswith("()")
    module_name, sep, attr_path = spec.removesuffix("()").partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(
            f"Invalid evaluator path '{spec}': expected 'package.module:attribute'"
        )
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigurationError(
                f"Module '{module_name}' has no attribute '{attr_path}'"
            ) from e

    if factory:
        if not callable(target):
            raise ConfigurationError(f"Evaluator factory '{spec}' is not callable")
        try:
            target = target()
        except Exception as e:
            raise ConfigurationError(f"Evaluator factory '{spec}' failed: {e}") from e

    if not callable(target):
        raise ConfigurationError(f"Evaluator '{spec}' is not callable")
    return target
