"""Scoring aggregation for completed defenses.

Each jury member scores a scheduled meeting exactly once. Once every
member has scored, the final score is the plain arithmetic mean (no
weighting by role) rounded half-up to the configured decimal places.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from src.config.defense_config import ScoringPolicy
from src.domain.errors.meeting import AlreadyScoredError
from src.domain.errors.validation import ValidationError
from src.domain.models.meeting import Meeting


def validate_score(score: float, policy: ScoringPolicy) -> float:
    """Check range and granularity of a single jury score.

    Args:
        score: The submitted score.
        policy: Accepted range and step.

    Returns:
        The score as a float.

    Raises:
        ValidationError: If the score is not finite, out of range, or not a
            multiple of the policy step.
    """
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError("score", "must be a number")
    value = float(score)
    if not math.isfinite(value):
        raise ValidationError("score", "must be a finite number")
    if not policy.min_score <= value <= policy.max_score:
        raise ValidationError(
            "score",
            f"must be between {policy.min_score:g} and {policy.max_score:g}",
        )
    steps = (Decimal(str(value)) - Decimal(str(policy.min_score))) / Decimal(
        str(policy.score_step)
    )
    if steps != steps.to_integral_value():
        raise ValidationError(
            "score", f"must be a multiple of {policy.score_step:g}"
        )
    return value


def record_score(
    meeting_id: UUID,
    scores: Mapping[int, float],
    jury_member_id: int,
    score: float,
) -> dict[int, float]:
    """Return a new score map with `jury_member_id`'s score added.

    Raises:
        AlreadyScoredError: If the member has already scored.
    """
    if jury_member_id in scores:
        raise AlreadyScoredError(meeting_id, jury_member_id)
    updated = dict(scores)
    updated[jury_member_id] = score
    return updated


def is_scoring_complete(scores: Mapping[int, float], jury_ids: tuple[int, ...]) -> bool:
    return bool(jury_ids) and set(jury_ids) <= set(scores)


def compute_final_score(scores: Mapping[int, float], decimal_places: int = 2) -> float:
    """Arithmetic mean of all scores, rounded half-up.

    Raises:
        ValueError: If there are no scores.
    """
    if not scores:
        raise ValueError("cannot compute a final score without scores")
    total = sum((Decimal(str(value)) for value in scores.values()), Decimal(0))
    mean = total / Decimal(len(scores))
    quantum = Decimal(1).scaleb(-decimal_places)
    return float(mean.quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ScoringProgress:
    """How far the jury is through scoring a meeting."""

    meeting_id: UUID
    scored_count: int
    total_count: int
    pending_member_ids: tuple[int, ...]
    final_score: float | None

    @property
    def all_scored(self) -> bool:
        return self.total_count > 0 and self.scored_count == self.total_count


def scoring_progress(meeting: Meeting) -> ScoringProgress:
    pending = tuple(
        member_id for member_id in meeting.jury_ids if member_id not in meeting.juries_scores
    )
    return ScoringProgress(
        meeting_id=meeting.id,
        scored_count=len(meeting.jury_ids) - len(pending),
        total_count=len(meeting.jury_ids),
        pending_member_ids=pending,
        final_score=meeting.score,
    )
