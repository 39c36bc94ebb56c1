"""Base command class for CLI commands.

This module defines the abstract base class for CLI commands
following the Command pattern, plus the helpers commands share for
turning parsed arguments into a job and a client.
"""

from abc import ABC, abstractmethod
from argparse import Namespace
from pathlib import Path
from typing import Any

from pairwise_evaluator.client import EvaluationClient
from pairwise_evaluator.config.exceptions import ConfigurationError
from pairwise_evaluator.config.loader import import_evaluator, load_job_config
from pairwise_evaluator.config.models import JobConfig
from pairwise_evaluator.config.settings import get_settings
from pairwise_evaluator.models.base import BaseSchema
from pairwise_evaluator.stores.json_store import JsonFileStore

__all__ = ["BaseCommand", "CommandResult", "build_job_config"]

_OVERRIDES = (
    "store",
    "compare",
    "evaluate",
    "evaluators",
    "randomize_order",
    "max_concurrency",
    "load_nested",
    "experiment_prefix",
    "description",
    "seed",
)


class CommandResult(BaseSchema):
    """Result of a command execution.

    Attributes:
        exit_code: Exit code for the CLI (0 for success).
        output: Text or JSON to print.
        message: Optional message to display.

    """

    exit_code: int
    output: str = ""
    message: str | None = None


def build_job_config(args: Namespace) -> JobConfig:
    """Merge a YAML job file with command-line overrides.

    Flags left unset keep the file's values. Giving --compare on the
    command line clears a file's evaluate target and vice versa.

    Raises:
        ConfigurationError: If the merged job is invalid.

    """
    data: dict[str, Any] = {}
    config = getattr(args, "config", None)
    if config is not None:
        data = load_job_config(Path(config)).model_dump(exclude_none=True)

    for name in _OVERRIDES:
        value = getattr(args, name, None)
        if value is not None:
            data[name] = list(value) if isinstance(value, (list, tuple)) else value

    if getattr(args, "compare", None):
        data.pop("evaluate", None)
    elif getattr(args, "evaluate", None):
        data.pop("compare", None)

    try:
        return JobConfig.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid job: {e}") from e


class BaseCommand(ABC):
    """Abstract base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the command name for logging and display."""
        pass

    @abstractmethod
    async def execute(self, job: JobConfig, args: Namespace) -> CommandResult:
        """Execute the command.

        Args:
            job: Resolved job configuration.
            args: Parsed command-line arguments.

        Returns:
            CommandResult with exit code and output.

        """
        pass

    def create_client(self, job: JobConfig) -> EvaluationClient:
        """Open the job's store behind a client built from settings.

        Raises:
            ConfigurationError: If the job names no store.

        """
        if job.store is None:
            raise ConfigurationError("No store configured: pass --store or set 'store'")
        return EvaluationClient(JsonFileStore(job.store), settings=get_settings())

    def load_evaluators(self, job: JobConfig) -> list[Any]:
        """Import every evaluator named by the job."""
        return [import_evaluator(path) for path in job.evaluators]
