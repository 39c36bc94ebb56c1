"""Ordered transform pipeline applied to payloads before persistence.

Stages run in a fixed sequence, each a pure function over the payload:

1. function-level processor (``process_inputs`` / ``process_outputs``)
2. client-level anonymizer
3. client-level hide flag (``hide_inputs`` / ``hide_outputs``)

Every configured stage runs; a later stage sees the output of the
earlier ones. The pipeline is built explicitly by the caller instead of
being read from process-wide environment state.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Literal

from pairwise_evaluator.config.settings import TracingSettings
from pairwise_evaluator.processing.anonymizer import Anonymizer, create_anonymizer

__all__ = ["HideOption", "PayloadKind", "PayloadPipeline", "Processor"]

PayloadKind = Literal["inputs", "outputs"]
Processor = Callable[[dict[str, Any]], dict[str, Any]]
HideOption = bool | Processor


class PayloadPipeline:
    """Applies processors, an anonymizer, and hide flags in order."""

    def __init__(
        self,
        process_inputs: Processor | None = None,
        process_outputs: Processor | None = None,
        anonymizer: Anonymizer | Callable[[Any], Any] | None = None,
        hide_inputs: HideOption = False,
        hide_outputs: HideOption = False,
    ) -> None:
        self._processors: dict[PayloadKind, Processor | None] = {
            "inputs": process_inputs,
            "outputs": process_outputs,
        }
        self._anonymizer = anonymizer
        self._hide: dict[PayloadKind, HideOption] = {
            "inputs": hide_inputs,
            "outputs": hide_outputs,
        }

    @classmethod
    def from_settings(
        cls,
        settings: TracingSettings,
        anonymizer: Anonymizer | Callable[[Any], Any] | Sequence[Any] | None = None,
        process_inputs: Processor | None = None,
        process_outputs: Processor | None = None,
    ) -> PayloadPipeline:
        """Build a pipeline whose hide flags come from tracing settings.

        A sequence of replacement rules given as ``anonymizer`` is compiled
        with the configured ``anonymizer_max_depth``.
        """
        if anonymizer is not None and not callable(anonymizer):
            anonymizer = create_anonymizer(
                anonymizer, max_depth=settings.anonymizer_max_depth
            )
        return cls(
            process_inputs=process_inputs,
            process_outputs=process_outputs,
            anonymizer=anonymizer,
            hide_inputs=settings.hide_inputs,
            hide_outputs=settings.hide_outputs,
        )

    @property
    def is_identity(self) -> bool:
        """True when no stage is configured."""
        return (
            self._processors["inputs"] is None
            and self._processors["outputs"] is None
            and self._anonymizer is None
            and self._hide["inputs"] is False
            and self._hide["outputs"] is False
        )

    def process(self, kind: PayloadKind, payload: dict[str, Any] | None) -> dict[str, Any] | None:
        """Run every configured stage over one payload.

        Args:
            kind: Whether the payload holds inputs or outputs.
            payload: The payload; None passes through untouched.

        Returns:
            The transformed payload.

        """
        if payload is None:
            return None

        result: dict[str, Any] = dict(payload)

        processor = self._processors[kind]
        if processor is not None:
            result = processor(result)

        if self._anonymizer is not None:
            result = self._anonymizer(result)

        hide = self._hide[kind]
        if hide is True:
            result = {}
        elif callable(hide):
            result = hide(result)

        return result

    def anonymize(self, value: Any) -> Any:
        """Apply only the anonymizer stage to a value of any type."""
        if value is None or self._anonymizer is None:
            return value
        return self._anonymizer(value)

    def process_inputs(self, payload: dict[str, Any] | None) -> dict[str, Any] | None:
        return self.process("inputs", payload)

    def process_outputs(self, payload: dict[str, Any] | None) -> dict[str, Any] | None:
        return self.process("outputs", payload)
