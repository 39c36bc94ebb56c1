"""structlog setup shared by the orchestrators and the CLI.

Log lines are rendered for the console by default, or as JSON lines for
log collectors. Identifiers bound with ``bind_evaluation_context`` (for
example the comparative experiment id) are merged into every line logged
inside the block, including lines from evaluator worker threads.
"""

import logging
import sys
from collections.abc import Iterable

import structlog

__all__ = ["bind_evaluation_context", "configure_logging", "get_logger"]

NOISY_LOGGERS = ("claude_agent_sdk", "httpx", "asyncio")


def configure_logging(
    verbose: bool = False,
    json_output: bool = False,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure structlog over the standard library logging module.

    Args:
        verbose: Log at DEBUG instead of INFO.
        json_output: Render JSON lines instead of console output.
        quiet: Third-party loggers held at WARNING unless verbose.

    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    for name in quiet:
        logging.getLogger(name).setLevel(level if verbose else logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_evaluation_context(**ids: str):
    """Bind evaluation identifiers to every log line inside a ``with`` block."""
    return structlog.contextvars.bound_contextvars(**ids)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
