"""Anonymizers for payloads captured before persistence.

An anonymizer walks a nested payload (mappings, lists, tuples) and
rewrites string leaves. The walk stops at a configurable depth so that
pathological payloads stay cheap; anything deeper is returned as is.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pairwise_evaluator.config.defaults import DEFAULT_ANONYMIZER_MAX_DEPTH
from pairwise_evaluator.logging_config import get_logger

__all__ = ["Anonymizer", "ReplacementRule", "StringReplacer", "create_anonymizer"]

logger = get_logger(__name__)

StringReplacer = Callable[[str, tuple[str | int, ...]], str]


class ReplacementRule:
    """A compiled regex with its replacement text."""

    __slots__ = ("pattern", "replacement")

    def __init__(self, pattern: str | re.Pattern[str], replacement: str = "<redacted>") -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.replacement = replacement

    def apply(self, value: str) -> str:
        return self.pattern.sub(self.replacement, value)

    def __repr__(self) -> str:
        return f"ReplacementRule({self.pattern.pattern!r}, {self.replacement!r})"


class Anonymizer:
    """Applies a string replacer to every string leaf of a payload.

    Attributes:
        max_depth: Number of container levels the walk descends into.

    """

    def __init__(
        self,
        replacer: StringReplacer,
        max_depth: int = DEFAULT_ANONYMIZER_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth}")
        self._replacer = replacer
        self.max_depth = max_depth

    def __call__(self, payload: Any) -> Any:
        return self._walk(payload, (), 0)

    def _walk(self, value: Any, path: tuple[str | int, ...], depth: int) -> Any:
        if isinstance(value, str):
            return self._replacer(value, path)

        if depth >= self.max_depth:
            if isinstance(value, (Mapping, list, tuple)):
                logger.debug("anonymizer_depth_limit_reached", path=list(path))
            return value

        if isinstance(value, Mapping):
            return {
                key: self._walk(item, (*path, str(key)), depth + 1)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            walked = [
                self._walk(item, (*path, index), depth + 1)
                for index, item in enumerate(value)
            ]
            return tuple(walked) if isinstance(value, tuple) else walked
        return value


def create_anonymizer(
    replacer: Sequence[ReplacementRule | tuple[str, str] | Mapping[str, str]]
    | StringReplacer,
    max_depth: int = DEFAULT_ANONYMIZER_MAX_DEPTH,
) -> Anonymizer:
    """Build an anonymizer from regex rules or a replacer function.

    Args:
        replacer: Either a callable ``(value, path) -> value`` or a sequence
            of rules. A rule is a ReplacementRule, a ``(pattern, replacement)``
            tuple, or a mapping with ``pattern`` and optional ``replace`` keys.
        max_depth: Number of container levels to descend into.

    Returns:
        A callable anonymizer.

    Example:
        anonymize = create_anonymizer([(r"\\b\\d{3}-\\d{2}-\\d{4}\\b", "<ssn>")])
        anonymize({"text": "ssn 123-45-6789"})  # {"text": "ssn <ssn>"}

    """
    if callable(replacer):
        return Anonymizer(replacer, max_depth=max_depth)

    rules = [_to_rule(rule) for rule in replacer]

    def _apply_rules(value: str, path: tuple[str | int, ...]) -> str:
        for rule in rules:
            value = rule.apply(value)
        return value

    return Anonymizer(_apply_rules, max_depth=max_depth)


def _to_rule(rule: ReplacementRule | tuple[str, str] | Mapping[str, str]) -> ReplacementRule:
    if isinstance(rule, ReplacementRule):
        return rule
    if isinstance(rule, Mapping):
        if "pattern" not in rule:
            raise ValueError(f"anonymizer rule is missing 'pattern': {rule!r}")
        return ReplacementRule(rule["pattern"], rule.get("replace", "<redacted>"))
    pattern, replacement = rule
    return ReplacementRule(pattern, replacement)
