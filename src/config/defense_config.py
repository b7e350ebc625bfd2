"""Thesis defense workflow configuration.

This module defines the policies the state machines are parameterized
with: jury size bounds, scoring range and granularity, and form content
length bounds. Each policy can be overridden via environment variables.

Environment Variables (Jury):
- DEFENSE_MIN_JURY_COUNT: Minimum jury size, instructor included (default: 3)
- DEFENSE_MAX_JURY_COUNT: Maximum jury size, 0 disables the bound (default: 10)

Environment Variables (Scoring):
- DEFENSE_MIN_SCORE: Lowest accepted score (default: 0.0)
- DEFENSE_MAX_SCORE: Highest accepted score (default: 20.0)
- DEFENSE_SCORE_STEP: Score granularity (default: 0.25)

Environment Variables (Form content):
- DEFENSE_MIN_TITLE_LENGTH / DEFENSE_MAX_TITLE_LENGTH (default: 10 / 200)
- DEFENSE_MIN_ABSTRACT_LENGTH / DEFENSE_MAX_ABSTRACT_LENGTH (default: 50 / 2000)
- DEFENSE_MIN_REASON_LENGTH: Rejection reason / revision message minimum (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class JuryPolicy:
    """Bounds on the jury assigned when the manager approves a form.

    Attributes:
        min_jury_count: Minimum number of jury members, instructor included.
                        Default: 3.
        max_jury_count: Maximum number of jury members, or None for no bound.
                        Default: 10.
    """

    min_jury_count: int = 3
    max_jury_count: int | None = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.min_jury_count < 1:
            raise ValueError(
                f"min_jury_count must be positive, got {self.min_jury_count}"
            )
        if self.max_jury_count is not None and self.max_jury_count < self.min_jury_count:
            raise ValueError(
                f"max_jury_count ({self.max_jury_count}) must be at least "
                f"min_jury_count ({self.min_jury_count})"
            )

    def describe(self) -> str:
        """Describe the accepted jury size, e.g. 'between 3 and 10 jury members'."""
        if self.max_jury_count is None:
            return f"at least {self.min_jury_count} jury members"
        if self.max_jury_count == self.min_jury_count:
            return f"exactly {self.min_jury_count} jury members"
        return f"between {self.min_jury_count} and {self.max_jury_count} jury members"

    @classmethod
    def from_environment(cls) -> JuryPolicy:
        """Create policy from environment variables with defaults.

        DEFENSE_MAX_JURY_COUNT=0 removes the upper bound.
        """
        max_count = _get_int_env("DEFENSE_MAX_JURY_COUNT", 10)
        return cls(
            min_jury_count=_get_int_env("DEFENSE_MIN_JURY_COUNT", 3),
            max_jury_count=max_count if max_count > 0 else None,
        )


@dataclass(frozen=True)
class ScoringPolicy:
    """Range and granularity of jury scores.

    Attributes:
        min_score: Lowest accepted score. Default: 0.0.
        max_score: Highest accepted score. Default: 20.0.
        score_step: Scores must be a multiple of this. Default: 0.25.
        decimal_places: Rounding of the final mean. Default: 2.
    """

    min_score: float = 0.0
    max_score: float = 20.0
    score_step: float = 0.25
    decimal_places: int = 2

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_score <= self.min_score:
            raise ValueError(
                f"max_score ({self.max_score}) must be greater than "
                f"min_score ({self.min_score})"
            )
        if self.score_step <= 0:
            raise ValueError(f"score_step must be positive, got {self.score_step}")
        if self.decimal_places < 0:
            raise ValueError(
                f"decimal_places must be non-negative, got {self.decimal_places}"
            )

    @classmethod
    def from_environment(cls) -> ScoringPolicy:
        """Create policy from environment variables with defaults."""
        return cls(
            min_score=_get_float_env("DEFENSE_MIN_SCORE", 0.0),
            max_score=_get_float_env("DEFENSE_MAX_SCORE", 20.0),
            score_step=_get_float_env("DEFENSE_SCORE_STEP", 0.25),
        )


@dataclass(frozen=True)
class FormContentPolicy:
    """Length bounds on thesis form content and reviewer messages.

    Lengths are measured after trimming surrounding whitespace.

    Attributes:
        min_title_length: Default: 10.
        max_title_length: Default: 200.
        min_abstract_length: Default: 50.
        max_abstract_length: Default: 2000.
        min_reason_length: Minimum length of rejection reasons and
                           revision messages. Default: 10.
    """

    min_title_length: int = 10
    max_title_length: int = 200
    min_abstract_length: int = 50
    max_abstract_length: int = 2000
    min_reason_length: int = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0 < self.min_title_length <= self.max_title_length:
            raise ValueError(
                f"title bounds invalid: {self.min_title_length}..{self.max_title_length}"
            )
        if not 0 < self.min_abstract_length <= self.max_abstract_length:
            raise ValueError(
                f"abstract bounds invalid: "
                f"{self.min_abstract_length}..{self.max_abstract_length}"
            )
        if self.min_reason_length < 1:
            raise ValueError(
                f"min_reason_length must be positive, got {self.min_reason_length}"
            )

    @classmethod
    def from_environment(cls) -> FormContentPolicy:
        """Create policy from environment variables with defaults."""
        return cls(
            min_title_length=_get_int_env("DEFENSE_MIN_TITLE_LENGTH", 10),
            max_title_length=_get_int_env("DEFENSE_MAX_TITLE_LENGTH", 200),
            min_abstract_length=_get_int_env("DEFENSE_MIN_ABSTRACT_LENGTH", 50),
            max_abstract_length=_get_int_env("DEFENSE_MAX_ABSTRACT_LENGTH", 2000),
            min_reason_length=_get_int_env("DEFENSE_MIN_REASON_LENGTH", 10),
        )


@dataclass(frozen=True)
class DefenseWorkflowConfig:
    """Bundle of every policy the workflow services need."""

    jury: JuryPolicy = field(default_factory=JuryPolicy)
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)
    content: FormContentPolicy = field(default_factory=FormContentPolicy)

    @classmethod
    def from_environment(cls) -> DefenseWorkflowConfig:
        """Create the full configuration from environment variables."""
        return cls(
            jury=JuryPolicy.from_environment(),
            scoring=ScoringPolicy.from_environment(),
            content=FormContentPolicy.from_environment(),
        )


# Default configuration (production)
DEFAULT_DEFENSE_WORKFLOW_CONFIG = DefenseWorkflowConfig()

# Test configuration - small jury so scenarios stay short
TEST_DEFENSE_WORKFLOW_CONFIG = DefenseWorkflowConfig(
    jury=JuryPolicy(min_jury_count=2, max_jury_count=5),
)
