"""Configuration: settings, defaults, and YAML job configs."""

from pairwise_evaluator.config.exceptions import ConfigurationError
from pairwise_evaluator.config.loader import import_evaluator, load_job_config
from pairwise_evaluator.config.models import JobConfig
from pairwise_evaluator.config.settings import (
    ComparativeSettings,
    JudgeSettings,
    Settings,
    TracingSettings,
    get_settings,
)

__all__ = [
    "ComparativeSettings",
    "ConfigurationError",
    "JobConfig",
    "JudgeSettings",
    "Settings",
    "TracingSettings",
    "get_settings",
    "import_evaluator",
    "load_job_config",
]
