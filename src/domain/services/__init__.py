"""Domain services for the thesis defense workflow.

Domain services contain business logic that doesn't naturally fit in entities
or value objects. All of them are pure and synchronous.

Constraints:
- Domain services must NOT depend on infrastructure
- Domain services never log; callers decide what to report

Available services:
- decide_form_transition: Thesis form review state machine
- decide_meeting_transition: Defense meeting state machine
- compute_intersection / build_availability_report: Jury availability
- compute_final_score / scoring_progress: Jury scoring
"""

from src.domain.services.availability_aggregator import (
    AvailabilityReport,
    MemberAvailability,
    build_availability_report,
    compute_intersection,
    group_by_date,
)
from src.domain.services.meeting_state_machine import (
    MEETING_TRANSITIONS,
    available_meeting_actions,
    create_meeting,
    decide_meeting_transition,
)
from src.domain.services.scoring_aggregator import (
    ScoringProgress,
    compute_final_score,
    scoring_progress,
    validate_score,
)
from src.domain.services.thesis_form_state_machine import (
    FORM_TRANSITIONS,
    available_form_actions,
    awaiting_party,
    create_thesis_form,
    decide_form_transition,
    revision_targets_for,
)

__all__ = [
    "AvailabilityReport",
    "FORM_TRANSITIONS",
    "MEETING_TRANSITIONS",
    "MemberAvailability",
    "ScoringProgress",
    "available_form_actions",
    "available_meeting_actions",
    "awaiting_party",
    "build_availability_report",
    "compute_final_score",
    "compute_intersection",
    "create_meeting",
    "create_thesis_form",
    "decide_form_transition",
    "decide_meeting_transition",
    "group_by_date",
    "revision_targets_for",
    "scoring_progress",
    "validate_score",
]
