"""Application ports - interfaces to the workflow's collaborators.

Ports define the contracts the application services depend on; the
infrastructure layer provides implementations (see src/infrastructure/stubs).

Available ports:
- ThesisFormRepositoryProtocol: Form persistence with version checks
- MeetingRepositoryProtocol: Meeting persistence with version checks
- UserDirectoryProtocol: Roles and professor rosters
- TimeAuthorityProtocol: Injected clock
- WorkflowNotifierProtocol: Hand-off of participant notices
"""

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.thesis_form_repository import ThesisFormRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.user_directory import UserDirectoryProtocol
from src.application.ports.workflow_notifier import WorkflowNotifierProtocol

__all__: list[str] = [
    "MeetingRepositoryProtocol",
    "ThesisFormRepositoryProtocol",
    "TimeAuthorityProtocol",
    "UserDirectoryProtocol",
    "WorkflowNotifierProtocol",
]
