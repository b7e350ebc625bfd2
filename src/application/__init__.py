"""
Application layer - Use cases and orchestration for the defense workflow.

This layer contains:
- Application services (async orchestration of the state machines)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain, config
- CANNOT import from: infrastructure
"""

from src.application.services import MeetingService, ThesisFormService

__all__: list[str] = ["MeetingService", "ThesisFormService"]
