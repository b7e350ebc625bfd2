"""
Domain layer - Pure business logic for the thesis defense workflow.

This layer contains:
- Domain models (ThesisForm, Meeting, TimeSlot, actions, results)
- Domain services (form and meeting state machines, aggregators)
- Domain exceptions

CRITICAL: This layer must NOT import from application or infrastructure.
Only stdlib, typing, and src.config imports are allowed.
"""

from src.domain.exceptions import DefenseWorkflowError

__all__: list[str] = ["DefenseWorkflowError"]
