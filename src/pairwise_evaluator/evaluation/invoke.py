"""Invocation of user evaluator functions.

Evaluators may be plain functions or coroutine functions. Plain
functions run in a worker thread so a slow scorer never blocks other
in-flight jobs on the event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Mapping
from typing import Any

__all__ = ["bind_arguments", "call_evaluator", "evaluator_name"]


def evaluator_name(func: Callable[..., Any]) -> str:
    """Return a readable name for an evaluator callable."""
    name = getattr(func, "__name__", None)
    if name and name != "<lambda>":
        return name
    return type(func).__name__


def _is_async_callable(func: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def bind_arguments(
    func: Callable[..., Any],
    available: Mapping[str, Any],
    positional: tuple[str, ...],
) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """Decide how to pass arguments to an evaluator.

    When every parameter of ``func`` is named after one of the available
    arguments, arguments are passed by keyword; this lets evaluators ask
    for ``inputs``, ``outputs`` or ``reference_outputs`` directly.
    Otherwise the ``positional`` arguments are passed in order.

    Args:
        func: The evaluator.
        available: Every argument the caller can supply, by name.
        positional: Names passed positionally in the fallback case.

    Returns:
        Positional and keyword arguments for the call.

    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return tuple(available[name] for name in positional), {}

    params = [
        p
        for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    ]
    has_var = any(
        p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in signature.parameters.values()
    )
    if params and not has_var and all(p.name in available for p in params):
        return (), {p.name: available[p.name] for p in params}
    return tuple(available[name] for name in positional), {}


async def call_evaluator(
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> Any:
    """Call an evaluator without blocking the event loop."""
    if _is_async_callable(func):
        return await func(*args, **kwargs)

    result = await asyncio.to_thread(func, *args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
