"""Pairwise LLM-as-judge evaluator.

The judge is shown the example inputs and the two responses, blinded to
which experiment produced them, and returns a five-point verdict. The
verdict becomes per-run scores: 1 for the winner, 0 for the loser, 0.5
each on a tie. With position bias mitigation enabled the pair is judged
in both orders and inconsistent verdicts collapse to a tie.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pairwise_evaluator.evaluators.claude_client import ClaudeClient
from pairwise_evaluator.evaluators.exceptions import JudgeError
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.dataset import Example
from pairwise_evaluator.models.feedback import ComparativeScore
from pairwise_evaluator.models.judge import ComparisonVerdict, JudgeVerdict
from pairwise_evaluator.models.run import Run

__all__ = ["PairwiseJudge"]

logger = get_logger(__name__)

_DEFAULT_CRITERIA = (
    "Correctness with respect to the reference answer, when one is given",
    "Helpfulness and completeness of the response",
)

_SYSTEM_PROMPT = """You are an expert judge comparing two responses to the same input. \
Decide which response is better.

Rules:
- Be objective and evidence-based in your assessment
- You are blinded to which system produced each response
- Do not let the order of presentation or response length sway you
- Use the 5-point verdict scale: a_much_better, a_slightly_better, tie, \
b_slightly_better, b_much_better"""

_USER_PROMPT_TEMPLATE = """## Input

{inputs}

## Reference Output

{reference}

## Criteria

{criteria}

## Response A

{response_a}

## Response B

{response_b}

Give a verdict and a short rationale."""


class PairwiseJudge:
    """Compares the outputs of two runs with an LLM judge.

    Attributes:
        key: Feedback key the scores are recorded under.

    """

    def __init__(
        self,
        client: ClaudeClient,
        criteria: Sequence[str] = _DEFAULT_CRITERIA,
        key: str = "preference",
        position_bias_mitigation: bool = False,
    ) -> None:
        self._client = client
        self._criteria = list(criteria)
        self._position_bias_mitigation = position_bias_mitigation
        self.key = key
        self.__name__ = key

    async def __call__(self, runs: Sequence[Run], example: Example) -> ComparativeScore:
        """Judge an ordered run pair.

        Raises:
            JudgeError: If the judge call fails.

        """
        run_a, run_b = runs
        original = await self._judge_once(example, run_a, run_b)
        verdict = original.verdict
        rationale = original.rationale

        if self._position_bias_mitigation:
            swapped = await self._judge_once(example, run_b, run_a)
            verdict, consistent = self._reconcile_verdicts(
                original.verdict, swapped.verdict.flip()
            )
            logger.info(
                "judge_comparison_complete",
                example_id=example.id,
                original=original.verdict.value,
                flipped=swapped.verdict.flip().value,
                final=verdict.value,
                consistent=consistent,
            )
            if not consistent:
                rationale = (
                    f"Inconsistent across orderings. A first: {original.rationale} "
                    f"B first: {swapped.rationale}"
                )

        return ComparativeScore(
            key=self.key,
            scores=self._scores_for(verdict, run_a.id, run_b.id),
            comment=rationale,
        )

    async def _judge_once(self, example: Example, first: Run, second: Run) -> JudgeVerdict:
        prompt = f"{_SYSTEM_PROMPT}\n\n" + _USER_PROMPT_TEMPLATE.format(
            inputs=_format_payload(example.inputs),
            reference=_format_payload(example.outputs) if example.outputs else "*None given.*",
            criteria="\n".join(f"- {c}" for c in self._criteria),
            response_a=_format_payload(first.outputs),
            response_b=_format_payload(second.outputs),
        )
        try:
            return await self._client.generate_structured(prompt, JudgeVerdict)
        except Exception as e:
            raise JudgeError(f"Judge LLM call failed: {e}") from e

    @staticmethod
    def _scores_for(verdict: ComparisonVerdict, run_a_id: str, run_b_id: str) -> dict[str, float]:
        if verdict.score > 0:
            return {run_a_id: 1.0, run_b_id: 0.0}
        if verdict.score < 0:
            return {run_a_id: 0.0, run_b_id: 1.0}
        return {run_a_id: 0.5, run_b_id: 0.5}

    @staticmethod
    def _reconcile_verdicts(
        original: ComparisonVerdict,
        flipped_swapped: ComparisonVerdict,
    ) -> tuple[ComparisonVerdict, bool]:
        """Reconcile the two orderings; disagreement becomes a tie."""
        if original == flipped_swapped:
            return original, True
        return ComparisonVerdict.tie, False


def _format_payload(payload: dict[str, Any] | None) -> str:
    if not payload:
        return "*Empty.*"
    return "```json\n" + json.dumps(payload, indent=2, default=str, sort_keys=True) + "\n```"
