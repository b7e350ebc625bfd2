"""Bootstrap wiring for the defense workflow services."""

from __future__ import annotations

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.thesis_form_repository import ThesisFormRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.user_directory import UserDirectoryProtocol
from src.application.ports.workflow_notifier import WorkflowNotifierProtocol
from src.application.services.meeting_service import MeetingService
from src.application.services.thesis_form_service import ThesisFormService
from src.config.defense_config import DefenseWorkflowConfig
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from src.infrastructure.stubs.meeting_repository_stub import MeetingRepositoryStub
from src.infrastructure.stubs.thesis_form_repository_stub import ThesisFormRepositoryStub
from src.infrastructure.stubs.user_directory_stub import UserDirectoryStub
from src.infrastructure.stubs.workflow_notifier_stub import WorkflowNotifierStub

_form_repository: ThesisFormRepositoryProtocol | None = None
_meeting_repository: MeetingRepositoryProtocol | None = None
_user_directory: UserDirectoryProtocol | None = None
_notifier: WorkflowNotifierProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_config: DefenseWorkflowConfig | None = None


def get_form_repository() -> ThesisFormRepositoryProtocol:
    """Get thesis form repository instance."""
    global _form_repository
    if _form_repository is None:
        _form_repository = ThesisFormRepositoryStub()
    return _form_repository


def get_meeting_repository() -> MeetingRepositoryProtocol:
    """Get meeting repository instance."""
    global _meeting_repository
    if _meeting_repository is None:
        _meeting_repository = MeetingRepositoryStub()
    return _meeting_repository


def get_user_directory() -> UserDirectoryProtocol:
    """Get user directory instance."""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectoryStub()
    return _user_directory


def get_notifier() -> WorkflowNotifierProtocol:
    """Get workflow notifier instance."""
    global _notifier
    if _notifier is None:
        _notifier = WorkflowNotifierStub()
    return _notifier


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_config() -> DefenseWorkflowConfig:
    """Get workflow policies, read from the environment on first use."""
    global _config
    if _config is None:
        _config = DefenseWorkflowConfig.from_environment()
    return _config


def get_thesis_form_service() -> ThesisFormService:
    """Build a thesis form service over the current collaborators."""
    return ThesisFormService(
        form_repo=get_form_repository(),
        meeting_repo=get_meeting_repository(),
        user_directory=get_user_directory(),
        notifier=get_notifier(),
        time_authority=get_time_authority(),
        config=get_config(),
    )


def get_meeting_service() -> MeetingService:
    """Build a meeting service over the current collaborators."""
    return MeetingService(
        meeting_repo=get_meeting_repository(),
        notifier=get_notifier(),
        time_authority=get_time_authority(),
        config=get_config(),
    )


def set_form_repository(repo: ThesisFormRepositoryProtocol) -> None:
    global _form_repository
    _form_repository = repo


def set_meeting_repository(repo: MeetingRepositoryProtocol) -> None:
    global _meeting_repository
    _meeting_repository = repo


def set_user_directory(directory: UserDirectoryProtocol) -> None:
    global _user_directory
    _user_directory = directory


def set_notifier(notifier: WorkflowNotifierProtocol) -> None:
    global _notifier
    _notifier = notifier


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    global _time_authority
    _time_authority = time_authority


def set_config(config: DefenseWorkflowConfig) -> None:
    global _config
    _config = config


def reset_defense_workflow_dependencies() -> None:
    """Reset all singletons (for testing)."""
    global _form_repository, _meeting_repository, _user_directory
    global _notifier, _time_authority, _config
    _form_repository = None
    _meeting_repository = None
    _user_directory = None
    _notifier = None
    _time_authority = None
    _config = None
