"""Claude client wrapper with retry logic.

This module wraps the Claude Agent SDK with retry on transient errors
and structured (pydantic-validated) output support.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Any, TypeVar

from claude_agent_sdk import ClaudeAgentOptions
from claude_agent_sdk import query as sdk_query
from pydantic import BaseModel

from pairwise_evaluator.config.defaults import DEFAULT_JUDGE_MAX_RETRIES
from pairwise_evaluator.config.settings import JudgeSettings, get_settings
from pairwise_evaluator.evaluators.exceptions import ClaudeAPIError
from pairwise_evaluator.logging_config import get_logger

__all__ = ["ClaudeClient"]

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

_JSON_BLOCK_PATTERNS = (
    r"```json\s*\n?(.*?)\n?```",
    r"```\s*\n?(.*?)\n?```",
)


@dataclass
class QueryResult:
    """Container for SDK query results."""

    result_message: Any
    assistant_content: Any


class ClaudeClient:
    """Client for Claude queries with structured output.

    Attributes:
        model: Claude model identifier.
        max_turns: Maximum turns per query.
        max_retries: Attempts before giving up on transient errors.
        retry_delay: Base delay between retries in seconds.

    """

    def __init__(
        self,
        model: str | None = None,
        max_turns: int | None = None,
        max_retries: int = DEFAULT_JUDGE_MAX_RETRIES,
        retry_delay: float = 1.0,
        settings: JudgeSettings | None = None,
    ) -> None:
        settings = settings or get_settings().judge
        self.model = model or settings.model
        self.max_turns = max_turns if max_turns is not None else settings.max_turns
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        logger.debug(
            "claude_client_initialized",
            model=self.model,
            max_turns=self.max_turns,
        )

    async def _query_with_retry(self, prompt: str) -> QueryResult:
        """Execute an SDK query with exponential backoff.

        Raises:
            ClaudeAPIError: If all attempts fail or a non-transient error occurs.

        """
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                result_message = None
                assistant_content: Any = None

                async for message in sdk_query(
                    prompt=prompt,
                    options=ClaudeAgentOptions(
                        model=self.model,
                        max_turns=self.max_turns,
                        permission_mode="plan",
                    ),
                ):
                    msg_type = type(message).__name__
                    if msg_type == "AssistantMessage":
                        assistant_content = getattr(message, "content", None)
                    elif msg_type == "ResultMessage":
                        result_message = message

                if result_message is None:
                    raise ClaudeAPIError("No ResultMessage received from SDK")

                return QueryResult(
                    result_message=result_message,
                    assistant_content=assistant_content,
                )

            except (asyncio.TimeoutError, ConnectionError, OSError) as e:
                last_error = e
                logger.warning(
                    "claude_api_error_retryable",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (2**attempt))

            except ClaudeAPIError:
                raise

            except Exception as e:
                logger.error(
                    "claude_api_error_unexpected",
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise ClaudeAPIError(f"Unexpected error in Claude API call: {e}") from e

        logger.error(
            "claude_all_retries_exhausted",
            attempts=self.max_retries,
            final_error=str(last_error),
        )
        raise ClaudeAPIError(
            f"Claude API call failed after {self.max_retries} attempts: {last_error}"
        )

    async def generate(self, prompt: str) -> str:
        """Generate a text response."""
        return self._extract_text(await self._query_with_retry(prompt))

    async def generate_structured(self, prompt: str, model_cls: type[T]) -> T:
        """Generate a response validated against a pydantic model.

        Raises:
            ClaudeAPIError: If the call fails after retries.
            pydantic.ValidationError: If the response does not match the model.

        """
        json_prompt = f"""{prompt}

IMPORTANT: Respond with ONLY valid JSON (no markdown, no explanation).
The JSON must match this schema:
{model_cls.model_json_schema()}"""

        result_text = self._extract_text(await self._query_with_retry(json_prompt))
        json_text = _extract_json(result_text)
        try:
            return model_cls.model_validate_json(json_text)
        except ValueError as e:
            logger.error(
                "claude_json_parse_error",
                error=str(e),
                response_text=json_text[:500],
            )
            raise

    def _extract_text(self, query_result: QueryResult) -> str:
        """Pull the response text out of an SDK result.

        Raises:
            ClaudeAPIError: If no text can be found.

        """
        result = getattr(query_result.result_message, "result", None)
        if isinstance(result, str) and result.strip():
            return result.strip()

        for content in (
            result,
            query_result.assistant_content,
            getattr(query_result.result_message, "content", None),
        ):
            text = _text_from_content(content)
            if text:
                return text

        raise ClaudeAPIError(
            "Could not extract text from SDK response "
            f"(subtype: {getattr(query_result.result_message, 'subtype', 'unknown')})"
        )


def _text_from_content(content: Any) -> str | None:
    """Join the text of content blocks, if any."""
    if content is None:
        return None
    if isinstance(content, str):
        return content.strip() or None
    if isinstance(content, list):
        texts = []
        for block in content:
            if hasattr(block, "text"):
                texts.append(block.text)
            elif isinstance(block, dict) and "text" in block:
                texts.append(block["text"])
        if texts:
            return "\n".join(texts).strip()
    return None


def _extract_json(text: str) -> str:
    """Extract a JSON object from text that may wrap it in markdown or prose."""
    for pattern in _JSON_BLOCK_PATTERNS:
        match = re.search(pattern, text, re.DOTALL)
        if match and match.group(1).strip():
            return match.group(1).strip()

    json_match = re.search(r"\{[\s\S]*\}", text)
    if json_match:
        return json_match.group(0).strip()
    return text.strip()
