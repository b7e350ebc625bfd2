"""Application services - Use case orchestration.

This module contains application services that orchestrate the pure
workflow state machines and coordinate with infrastructure adapters.

Available services:
- ThesisFormService: Form submission, review, and meeting creation
- MeetingService: Availability, time selection, scheduling, and scoring
"""

from src.application.services.meeting_service import MeetingService
from src.application.services.thesis_form_service import ThesisFormService

__all__: list[str] = [
    "MeetingService",
    "ThesisFormService",
]
