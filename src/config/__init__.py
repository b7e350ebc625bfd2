"""Configuration module for the thesis defense workflow.

This module provides centralized configuration for the state machines
and application services.

Available Configurations:
- JuryPolicy: Jury size bounds
- ScoringPolicy: Score range and granularity
- FormContentPolicy: Title, abstract, and reviewer message lengths
- DefenseWorkflowConfig: Bundle of the above
"""

from src.config.defense_config import (
    DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    TEST_DEFENSE_WORKFLOW_CONFIG,
    DefenseWorkflowConfig,
    FormContentPolicy,
    JuryPolicy,
    ScoringPolicy,
)

__all__ = [
    "DefenseWorkflowConfig",
    "FormContentPolicy",
    "JuryPolicy",
    "ScoringPolicy",
    "DEFAULT_DEFENSE_WORKFLOW_CONFIG",
    "TEST_DEFENSE_WORKFLOW_CONFIG",
]
