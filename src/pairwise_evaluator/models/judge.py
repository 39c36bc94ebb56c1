"""Verdict models for the pairwise LLM judge."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from pairwise_evaluator.models.base import BaseSchema

__all__ = ["ComparisonVerdict", "JudgeVerdict"]

_VERDICT_SCORES: dict[ComparisonVerdict, int] = {}
_VERDICT_FLIPS: dict[ComparisonVerdict, ComparisonVerdict] = {}


class ComparisonVerdict(str, Enum):
    """Five-point scale for pairwise verdicts.

    Attributes:
        a_much_better: Response A is significantly better (+2).
        a_slightly_better: Response A is somewhat better (+1).
        tie: Both responses are comparable (0).
        b_slightly_better: Response B is somewhat better (-1).
        b_much_better: Response B is significantly better (-2).

    """

    a_much_better = "a_much_better"
    a_slightly_better = "a_slightly_better"
    tie = "tie"
    b_slightly_better = "b_slightly_better"
    b_much_better = "b_much_better"

    @property
    def score(self) -> int:
        """Return the signed score for this verdict (positive favours A)."""
        return _VERDICT_SCORES[self]

    def flip(self) -> ComparisonVerdict:
        """Return the verdict from the opposite perspective (A<->B)."""
        return _VERDICT_FLIPS[self]


_VERDICT_SCORES.update(
    {
        ComparisonVerdict.a_much_better: +2,
        ComparisonVerdict.a_slightly_better: +1,
        ComparisonVerdict.tie: 0,
        ComparisonVerdict.b_slightly_better: -1,
        ComparisonVerdict.b_much_better: -2,
    }
)

_VERDICT_FLIPS.update(
    {
        ComparisonVerdict.a_much_better: ComparisonVerdict.b_much_better,
        ComparisonVerdict.a_slightly_better: ComparisonVerdict.b_slightly_better,
        ComparisonVerdict.tie: ComparisonVerdict.tie,
        ComparisonVerdict.b_slightly_better: ComparisonVerdict.a_slightly_better,
        ComparisonVerdict.b_much_better: ComparisonVerdict.a_much_better,
    }
)


class JudgeVerdict(BaseSchema):
    """Structured output expected from the judge model.

    Attributes:
        verdict: Which response is better, on the five-point scale.
        rationale: Explanation for the verdict.

    """

    verdict: ComparisonVerdict
    rationale: str = Field(..., min_length=1)
