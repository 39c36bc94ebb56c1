"""Application settings using pydantic-settings.

Settings can be overridden via environment variables with the
appropriate prefix. They are read once, at construction time of the
client or CLI command, and then passed explicitly to the orchestrators.

Environment Variables:
    PAIRWISE_COMPARATIVE_MAX_CONCURRENCY: Concurrent evaluator invocations
    PAIRWISE_COMPARATIVE_RANDOMIZE_ORDER: Shuffle run order per example
    PAIRWISE_COMPARATIVE_LOAD_NESTED: Load full run trees
    PAIRWISE_TRACING_HIDE_INPUTS: Drop inputs from persisted payloads
    PAIRWISE_TRACING_HIDE_OUTPUTS: Drop outputs from persisted payloads
    PAIRWISE_TRACING_ANONYMIZER_MAX_DEPTH: Recursion limit for anonymizers
    PAIRWISE_JUDGE_MODEL: Model used by the pairwise LLM judge
    PAIRWISE_JUDGE_TEMPERATURE: LLM temperature for judging
    PAIRWISE_JUDGE_MAX_TURNS: Maximum turns per judge query
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pairwise_evaluator.config.defaults import (
    ANONYMIZER_MAX_DEPTH_MAX,
    ANONYMIZER_MAX_DEPTH_MIN,
    DEFAULT_ANONYMIZER_MAX_DEPTH,
    DEFAULT_JUDGE_MAX_TURNS,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_JUDGE_TEMPERATURE,
    DEFAULT_LOAD_NESTED,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RANDOMIZE_ORDER,
    MAX_CONCURRENCY_MAX,
    MAX_CONCURRENCY_MIN,
)

__all__ = [
    "ComparativeSettings",
    "TracingSettings",
    "JudgeSettings",
    "Settings",
    "get_settings",
]


class ComparativeSettings(BaseSettings):
    """Settings for comparative evaluation.

    Attributes:
        max_concurrency: Upper bound on in-flight evaluator invocations.
        randomize_order: Whether to shuffle the run pair per example.
        load_nested: Whether to load child runs along with root runs.

    """

    model_config = SettingsConfigDict(
        env_prefix="PAIRWISE_COMPARATIVE_",
        extra="ignore",
    )

    max_concurrency: int = Field(
        default=DEFAULT_MAX_CONCURRENCY,
        ge=MAX_CONCURRENCY_MIN,
        le=MAX_CONCURRENCY_MAX,
        description="Upper bound on concurrently running evaluator calls",
    )
    randomize_order: bool = Field(
        default=DEFAULT_RANDOMIZE_ORDER,
        description="Shuffle the two runs presented to evaluators per example",
    )
    load_nested: bool = Field(
        default=DEFAULT_LOAD_NESTED,
        description="Load full run trees instead of root runs only",
    )


class TracingSettings(BaseSettings):
    """Settings for payload capture before persistence.

    Attributes:
        hide_inputs: Replace inputs with an empty mapping before persisting.
        hide_outputs: Replace outputs with an empty mapping before persisting.
        anonymizer_max_depth: Recursion depth limit for anonymizers.

    """

    model_config = SettingsConfigDict(
        env_prefix="PAIRWISE_TRACING_",
        extra="ignore",
    )

    hide_inputs: bool = Field(
        default=False,
        description="Drop inputs from persisted payloads",
    )
    hide_outputs: bool = Field(
        default=False,
        description="Drop outputs from persisted payloads",
    )
    anonymizer_max_depth: int = Field(
        default=DEFAULT_ANONYMIZER_MAX_DEPTH,
        ge=ANONYMIZER_MAX_DEPTH_MIN,
        le=ANONYMIZER_MAX_DEPTH_MAX,
        description="Maximum nesting depth an anonymizer walks into",
    )


class JudgeSettings(BaseSettings):
    """Settings for the pairwise LLM judge.

    Attributes:
        model: Claude model identifier for judging.
        temperature: LLM temperature (lower = more deterministic).
        max_turns: Maximum turns per judge query.

    """

    model_config = SettingsConfigDict(
        env_prefix="PAIRWISE_JUDGE_",
        extra="ignore",
    )

    model: str = Field(
        default=DEFAULT_JUDGE_MODEL,
        description="Claude model identifier for judging",
    )
    temperature: float = Field(
        default=DEFAULT_JUDGE_TEMPERATURE,
        ge=0.0,
        le=1.0,
        description="LLM temperature for judging",
    )
    max_turns: int = Field(
        default=DEFAULT_JUDGE_MAX_TURNS,
        ge=1,
        description="Maximum turns per judge query",
    )


class Settings(BaseSettings):
    """Root settings container.

    Use get_settings() to access the cached singleton instance.

    Attributes:
        comparative: Comparative evaluation settings.
        tracing: Payload capture settings.
        judge: Pairwise judge settings.

    """

    model_config = SettingsConfigDict(
        env_prefix="PAIRWISE_",
        extra="ignore",
    )

    comparative: ComparativeSettings = Field(default_factory=ComparativeSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)
    judge: JudgeSettings = Field(default_factory=JudgeSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings singleton.

    Returns:
        The Settings instance with values from environment variables.

    """
    return Settings()
