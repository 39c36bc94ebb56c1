"""Aggregation of comparative results into a summary.

Per metric key this computes wins, ties, mean scores, a Wilcoxon
signed-rank test over the per-example score differences, a bootstrap
confidence interval of the mean difference, and Cohen's d. It also
measures how often the first-presented run won when the presentation
order was shuffled. Uses only stdlib modules.
"""

from __future__ import annotations

import math
import random
import statistics as stats
from collections import defaultdict

from pairwise_evaluator.config.defaults import (
    DEFAULT_BOOTSTRAP_SAMPLES,
    DEFAULT_CONFIDENCE_LEVEL,
    POSITION_BIAS_LOWER,
    POSITION_BIAS_UPPER,
)
from pairwise_evaluator.logging_config import get_logger
from pairwise_evaluator.models.results import (
    KeyAggregate,
    PairResult,
    PresentationOrderAnalysis,
)

__all__ = ["ComparativeAggregator"]

logger = get_logger(__name__)


class ComparativeAggregator:
    """Summarises pair results for two experiments.

    Attributes:
        experiment_ids: The compared experiment ids, A first.
        run_experiment: Mapping of run id to the experiment it belongs to.

    """

    def __init__(
        self,
        experiment_ids: tuple[str, str],
        run_experiment: dict[str, str],
        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    ) -> None:
        self.experiment_ids = experiment_ids
        self.run_experiment = run_experiment
        self._confidence_level = confidence_level

    def aggregate(self, results: list[PairResult]) -> list[KeyAggregate]:
        """Build one KeyAggregate per metric key, sorted by key."""
        by_key: dict[str, list[PairResult]] = defaultdict(list)
        for result in results:
            by_key[result.result.key].append(result)
        return [self._aggregate_key(key, by_key[key]) for key in sorted(by_key)]

    def _scores_a_b(self, result: PairResult) -> tuple[float, float]:
        exp_a, exp_b = self.experiment_ids
        values = {
            self.run_experiment[run_id]: float(score)
            for run_id, score in result.result.scores.items()
        }
        return values[exp_a], values[exp_b]

    def _aggregate_key(self, key: str, results: list[PairResult]) -> KeyAggregate:
        exp_a, exp_b = self.experiment_ids
        wins = {exp_a: 0, exp_b: 0}
        ties = 0
        scores_a: list[float] = []
        scores_b: list[float] = []
        diffs: list[float] = []

        for result in results:
            a, b = self._scores_a_b(result)
            scores_a.append(a)
            scores_b.append(b)
            diffs.append(a - b)
            if a > b:
                wins[exp_a] += 1
            elif b > a:
                wins[exp_b] += 1
            else:
                ties += 1

        p_value: float | None = None
        effect_size: float | None = None
        ci: tuple[float, float] | None = None
        if len(diffs) >= 2:
            _, p_value = _wilcoxon_signed_rank(diffs)
            effect_size = _cohens_d_one_sample(diffs)
            ci = _bootstrap_ci(diffs, self._confidence_level)
        else:
            logger.debug(
                "insufficient_samples_for_test",
                key=key,
                sample_count=len(diffs),
            )

        preferred: str | None = None
        if wins[exp_a] > wins[exp_b]:
            preferred = exp_a
        elif wins[exp_b] > wins[exp_a]:
            preferred = exp_b

        return KeyAggregate(
            key=key,
            count=len(results),
            wins=wins,
            ties=ties,
            mean_scores={
                exp_a: stats.mean(scores_a) if scores_a else 0.0,
                exp_b: stats.mean(scores_b) if scores_b else 0.0,
            },
            p_value=p_value,
            effect_size=effect_size,
            confidence_interval=ci,
            preferred_experiment_id=preferred,
        )

    @staticmethod
    def analyze_presentation_order(
        results: list[PairResult],
    ) -> PresentationOrderAnalysis | None:
        """Measure first-position wins over shuffled pairs.

        Returns:
            The analysis, or None when no pair was presented swapped.

        """
        swapped = sum(1 for r in results if r.swapped)
        if swapped == 0:
            return None

        decided = 0
        first_wins = 0
        for result in results:
            first, second = (float(result.result.scores[rid]) for rid in result.run_ids)
            if first == second:
                continue
            decided += 1
            if first > second:
                first_wins += 1

        rate = first_wins / decided if decided else 0.5
        detected: str | None = None
        if decided and rate > POSITION_BIAS_UPPER:
            detected = "first"
        elif decided and rate < POSITION_BIAS_LOWER:
            detected = "second"

        return PresentationOrderAnalysis(
            decided_pairs=decided,
            swapped_pairs=swapped,
            first_position_win_rate=rate,
            detected_bias=detected,
        )


def _wilcoxon_signed_rank(diffs: list[float]) -> tuple[float, float]:
    """Wilcoxon signed-rank test of whether the median difference is zero.

    Uses the normal approximation without tie correction, so p-values are
    rough for fewer than about 20 non-zero differences.

    Returns:
        Tuple of (W statistic, two-sided p-value).

    """
    non_zero = sorted(((abs(d), d) for d in diffs if d != 0), key=lambda x: x[0])
    n = len(non_zero)
    if n == 0:
        return 0.0, 1.0

    ranks: list[tuple[float, float]] = []
    i = 0
    while i < n:
        j = i
        while j < n and non_zero[j][0] == non_zero[i][0]:
            j += 1
        avg_rank = (i + 1 + j) / 2.0
        for k in range(i, j):
            ranks.append((avg_rank, non_zero[k][1]))
        i = j

    w_plus = sum(rank for rank, sign in ranks if sign > 0)
    w_minus = sum(rank for rank, sign in ranks if sign < 0)
    w = min(w_plus, w_minus)

    if n <= 1:
        return w, 1.0

    mean_w = n * (n + 1) / 4.0
    std_w = math.sqrt(n * (n + 1) * (2 * n + 1) / 24.0)
    z = (w - mean_w) / std_w
    p_value = min(1.0, math.erfc(abs(z) / math.sqrt(2)))
    return w, p_value


def _bootstrap_ci(
    diffs: list[float],
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    n_bootstrap: int = DEFAULT_BOOTSTRAP_SAMPLES,
) -> tuple[float, float]:
    """Bootstrap confidence interval for the mean difference."""
    if len(diffs) < 2:
        mean = stats.mean(diffs) if diffs else 0.0
        return mean, mean

    rng = random.Random(42)  # fixed seed so reports are reproducible
    means = sorted(
        stats.mean(rng.choices(diffs, k=len(diffs))) for _ in range(n_bootstrap)
    )

    alpha = 1.0 - confidence_level
    lower_idx = max(0, min(int(math.floor(alpha / 2 * n_bootstrap)), n_bootstrap - 1))
    upper_idx = max(
        0, min(int(math.ceil((1 - alpha / 2) * n_bootstrap)) - 1, n_bootstrap - 1)
    )
    return means[lower_idx], means[upper_idx]


def _cohens_d_one_sample(diffs: list[float]) -> float:
    """Cohen's d of the differences against zero (0.0 when undefined)."""
    if len(diffs) < 2:
        return 0.0
    mean = stats.mean(diffs)
    std = stats.stdev(diffs)
    if std == 0:
        return 0.0
    return mean / std
