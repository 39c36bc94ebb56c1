"""Unit tests for the Claude client wrapper."""

from unittest.mock import patch

import pytest

from pairwise_evaluator.config.settings import JudgeSettings
from pairwise_evaluator.evaluators.claude_client import (
    ClaudeClient,
    _extract_json,
    _text_from_content,
)
from pairwise_evaluator.evaluators.exceptions import ClaudeAPIError
from pairwise_evaluator.models import ComparisonVerdict, JudgeVerdict

MODULE = "pairwise_evaluator.evaluators.claude_client"


class ResultMessage:
    """Stand-in for the SDK's final message."""

    def __init__(self, result: str | None) -> None:
        self.result = result
        self.subtype = "success"


class AssistantMessage:
    """Stand-in for the SDK's assistant message."""

    def __init__(self, content: list) -> None:
        self.content = content


def _fake_query(*messages):
    """Create a replacement for the SDK query generator."""

    async def query(prompt, options):
        for message in messages:
            yield message

    return query


def _client(**kwargs) -> ClaudeClient:
    return ClaudeClient(settings=JudgeSettings(), retry_delay=0, **kwargs)


class TestGenerate:
    """Tests for text and structured generation."""

    @pytest.mark.asyncio
    async def test_generate_text(self) -> None:
        """Test the result text is returned."""
        with patch(f"{MODULE}.sdk_query", _fake_query(ResultMessage("  hello "))):
            assert await _client().generate("hi") == "hello"

    @pytest.mark.asyncio
    async def test_falls_back_to_assistant_content(self) -> None:
        """Test text blocks of the assistant message are used when result is empty."""
        messages = (AssistantMessage([{"text": "from blocks"}]), ResultMessage(None))
        with patch(f"{MODULE}.sdk_query", _fake_query(*messages)):
            assert await _client().generate("hi") == "from blocks"

    @pytest.mark.asyncio
    async def test_generate_structured(self) -> None:
        """Test JSON wrapped in markdown is validated into the model."""
        text = '```json\n{"verdict": "tie", "rationale": "same"}\n```'
        with patch(f"{MODULE}.sdk_query", _fake_query(ResultMessage(text))):
            verdict = await _client().generate_structured("judge", JudgeVerdict)
        assert verdict.verdict == ComparisonVerdict.tie

    @pytest.mark.asyncio
    async def test_no_result_message(self) -> None:
        """Test a stream without a result message raises ClaudeAPIError."""
        with patch(f"{MODULE}.sdk_query", _fake_query()):
            with pytest.raises(ClaudeAPIError, match="No ResultMessage"):
                await _client().generate("hi")


class TestRetries:
    """Tests for retry behaviour."""

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self) -> None:
        """Test connection errors are retried until attempts run out."""
        calls = 0

        async def failing(prompt, options):
            nonlocal calls
            calls += 1
            raise ConnectionError("reset")
            yield  # pragma: no cover

        with patch(f"{MODULE}.sdk_query", failing):
            with pytest.raises(ClaudeAPIError, match="after 3 attempts"):
                await _client(max_retries=3).generate("hi")
        assert calls == 3

    @pytest.mark.asyncio
    async def test_unexpected_error_not_retried(self) -> None:
        """Test unexpected errors fail immediately."""
        calls = 0

        async def failing(prompt, options):
            nonlocal calls
            calls += 1
            raise RuntimeError("bad request")
            yield  # pragma: no cover

        with patch(f"{MODULE}.sdk_query", failing):
            with pytest.raises(ClaudeAPIError, match="Unexpected error"):
                await _client().generate("hi")
        assert calls == 1


class TestHelpers:
    """Tests for response parsing helpers."""

    def test_extract_json_from_prose(self) -> None:
        """Test a bare object embedded in prose is found."""
        assert _extract_json('Sure! {"a": 1} Done.') == '{"a": 1}'

    def test_text_from_content(self) -> None:
        """Test joining text blocks and ignoring empty content."""
        assert _text_from_content(None) is None
        assert _text_from_content("  ") is None
        assert _text_from_content([{"text": "a"}, {"text": "b"}]) == "a\nb"

    def test_settings_defaults(self) -> None:
        """Test model and turns come from judge settings."""
        client = ClaudeClient(settings=JudgeSettings(model="m", max_turns=2))
        assert (client.model, client.max_turns) == ("m", 2)
