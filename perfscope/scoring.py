"""Comparative scoring of subjects from their aggregates."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .aggregator import AggregateRecord

MAX_SCORE = 100.0

# One frame at 60fps
FRAME_BUDGET_MS = 16.0


@dataclass(frozen=True)
class SubjectScore:
    """Score of one subject in a comparison."""

    subject: str
    score: float


@dataclass(frozen=True)
class Comparison:
    """Ranked comparison of subjects.

    Attributes:
        fastest: Subject with the highest score, or None without records.
        ranking: Scores sorted best first; ties keep registration order.
    """

    fastest: str | None = None
    ranking: list[SubjectScore] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fastest": self.fastest,
            "ranking": [{"subject": s.subject, "score": s.score} for s in self.ranking],
        }


class ScoreCalculator:
    """Turns aggregate records into comparable scores.

    The score is ``max(0, 100 - average_duration)``: a lower average
    duration never scores lower, and typical durations land in [0, 100].
    """

    def score_of(self, record: AggregateRecord) -> float:
        return max(0.0, MAX_SCORE - record.average_duration)

    def compare(self, records: Iterable[AggregateRecord]) -> Comparison:
        """Rank records by score.

        Args:
            records: Aggregate snapshots in registration order.

        Returns:
            Comparison with the best subject and the full ranking.
        """
        scores = [SubjectScore(r.subject, self.score_of(r)) for r in records]
        # sorted() is stable, so equal scores keep registration order
        ranking = sorted(scores, key=lambda s: s.score, reverse=True)
        return Comparison(
            fastest=ranking[0].subject if ranking else None,
            ranking=ranking,
        )


class ThresholdScoreCalculator(ScoreCalculator):
    """Frame-budget score: full marks until the average exceeds the budget.

    Each millisecond over ``budget_ms`` costs ``penalty_per_ms`` points,
    capped at ``max_penalty``; the result is rounded to a whole number
    and never drops below 0.
    """

    def __init__(
        self,
        budget_ms: float = FRAME_BUDGET_MS,
        penalty_per_ms: float = 2.0,
        max_penalty: float = 30.0,
    ):
        if budget_ms < 0 or penalty_per_ms < 0 or not 0 <= max_penalty <= MAX_SCORE:
            raise ValueError(
                "budget_ms and penalty_per_ms must be >= 0, max_penalty within [0, 100]"
            )
        self.budget_ms = budget_ms
        self.penalty_per_ms = penalty_per_ms
        self.max_penalty = max_penalty

    def score_of(self, record: AggregateRecord) -> float:
        score = MAX_SCORE
        overrun = record.average_duration - self.budget_ms
        if overrun > 0:
            score -= min(self.max_penalty, overrun * self.penalty_per_ms)
        return float(max(0, round(score)))


def create_score_calculator(strategy: str = "linear") -> ScoreCalculator:
    """Select the score transform by name ("linear" or "threshold")."""
    if strategy == "threshold":
        return ThresholdScoreCalculator()
    if strategy == "linear":
        return ScoreCalculator()
    raise ValueError(f"Unknown score strategy: {strategy!r}")


__all__ = [
    "MAX_SCORE",
    "FRAME_BUDGET_MS",
    "SubjectScore",
    "Comparison",
    "ScoreCalculator",
    "ThresholdScoreCalculator",
    "create_score_calculator",
]
