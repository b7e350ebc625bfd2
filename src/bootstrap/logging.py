"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

# Environment variable selecting JSON ("production") or console output
ENVIRONMENT_ENV = "DEFENSE_ENVIRONMENT"


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog, defaulting the environment from DEFENSE_ENVIRONMENT."""
    _configure_structlog(environment=environment or os.getenv(ENVIRONMENT_ENV, "production"))


__all__ = ["ENVIRONMENT_ENV", "configure_structlog"]
