"""Domain models for the thesis defense workflow.

Contains value objects and domain models that represent
core business concepts. These models are immutable and
contain no infrastructure dependencies.
"""

from src.domain.models.actions import (
    ApproveForm,
    CancelMeeting,
    EditFormContent,
    FormAction,
    FormActionKind,
    MeetingAction,
    MeetingActionKind,
    RejectForm,
    RequestRevision,
    ScheduleMeeting,
    SelectTimeSlot,
    SubmitAvailability,
    SubmitRevision,
    SubmitScore,
)
from src.domain.models.meeting import Meeting, MeetingState
from src.domain.models.thesis_form import FormState, RevisionTarget, ThesisForm
from src.domain.models.time_slot import TimePeriod, TimeSlot
from src.domain.models.transition import (
    CreateMeeting,
    FormTransitionResult,
    MeetingTransitionResult,
    NotificationEvent,
    NotifyParticipants,
    PersistForm,
    PersistMeeting,
    SideEffect,
    TransitionResult,
)
from src.domain.models.user import Actor, Role, SimpleUser

__all__: list[str] = [
    "Actor",
    "ApproveForm",
    "CancelMeeting",
    "CreateMeeting",
    "EditFormContent",
    "FormAction",
    "FormActionKind",
    "FormState",
    "FormTransitionResult",
    "Meeting",
    "MeetingAction",
    "MeetingActionKind",
    "MeetingState",
    "MeetingTransitionResult",
    "NotificationEvent",
    "NotifyParticipants",
    "PersistForm",
    "PersistMeeting",
    "RejectForm",
    "RequestRevision",
    "RevisionTarget",
    "Role",
    "ScheduleMeeting",
    "SelectTimeSlot",
    "SideEffect",
    "SimpleUser",
    "SubmitAvailability",
    "SubmitRevision",
    "SubmitScore",
    "ThesisForm",
    "TimePeriod",
    "TimeSlot",
    "TransitionResult",
]
