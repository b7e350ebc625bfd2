"""Unit tests for MeetingService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.application.services.meeting_service import MeetingService
from src.domain.errors import (
    AlreadyScoredError,
    CollaboratorError,
    ConcurrentModificationError,
    InvalidTimeSlotError,
    MeetingNotFoundError,
)
from src.domain.models.actions import (
    CancelMeeting,
    ScheduleMeeting,
    SelectTimeSlot,
    SubmitAvailability,
    SubmitScore,
)
from src.domain.models.meeting import Meeting, MeetingState
from src.domain.models.transition import NotificationEvent
from src.domain.models.user import Role
from src.infrastructure.stubs import MeetingRepositoryStub, WorkflowNotifierStub
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.workflow_factories import (
    ADMIN,
    INSTRUCTOR,
    MANAGER,
    PROFESSOR_A,
    PROFESSOR_B,
    STUDENT,
    make_meeting,
    slot,
)


@pytest.fixture
async def meeting(meeting_repo: MeetingRepositoryStub) -> Meeting:
    stored = make_meeting()
    await meeting_repo.save(stored, None)
    return stored


class TestAvailabilityAndSelection:
    @pytest.mark.asyncio
    async def test_availability_then_selection(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        notifier: WorkflowNotifierStub,
        meeting: Meeting,
    ) -> None:
        await meeting_service.transition(
            meeting.id, SubmitAvailability(actor=INSTRUCTOR, time_slots=(slot(6), slot(7)))
        )
        await meeting_service.transition(
            meeting.id, SubmitAvailability(actor=PROFESSOR_A, time_slots=(slot(7),))
        )

        report = await meeting_service.availability_report(meeting.id)
        assert report.intersections == (slot(7),)
        assert report.awaiting_member_ids == (PROFESSOR_B.id,)

        with pytest.raises(InvalidTimeSlotError):
            await meeting_service.transition(
                meeting.id, SelectTimeSlot(actor=STUDENT, time_slot=slot(6))
            )
        await meeting_service.transition(
            meeting.id, SelectTimeSlot(actor=STUDENT, time_slot=slot(7))
        )

        stored = await meeting_repo.get(meeting.id)
        assert stored.state is MeetingState.STUDENT_SPECIFIED_TIME
        assert stored.selected_time_slot == slot(7)
        selected = notifier.sent[-1]
        assert selected.event is NotificationEvent.TIME_SLOT_SELECTED
        assert selected.recipient_roles == (Role.MANAGER,)

    @pytest.mark.asyncio
    async def test_identical_resubmission_writes_nothing(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        notifier: WorkflowNotifierStub,
        meeting: Meeting,
    ) -> None:
        action = SubmitAvailability(actor=PROFESSOR_A, time_slots=(slot(6),))
        await meeting_service.transition(meeting.id, action)
        version = (await meeting_repo.get(meeting.id)).version
        notifier.clear()

        result = await meeting_service.transition(meeting.id, action)

        assert not result.changed
        assert (await meeting_repo.get(meeting.id)).version == version
        assert notifier.sent == []


class TestSchedulingAndScoring:
    @pytest.mark.asyncio
    async def test_schedule_and_score_to_completion(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        notifier: WorkflowNotifierStub,
    ) -> None:
        meeting = make_meeting(MeetingState.STUDENT_SPECIFIED_TIME)
        await meeting_repo.save(meeting, None)

        await meeting_service.transition(
            meeting.id, ScheduleMeeting(actor=MANAGER, location="Room B-204")
        )
        for actor, score in ((INSTRUCTOR, 18.0), (PROFESSOR_A, 16.5)):
            await meeting_service.transition(meeting.id, SubmitScore(actor=actor, score=score))

        progress = await meeting_service.scoring_progress(meeting.id)
        assert progress.pending_member_ids == (PROFESSOR_B.id,)
        assert progress.final_score is None

        with pytest.raises(AlreadyScoredError):
            await meeting_service.transition(
                meeting.id, SubmitScore(actor=PROFESSOR_A, score=10.0)
            )

        result = await meeting_service.transition(
            meeting.id, SubmitScore(actor=PROFESSOR_B, score=17.5)
        )
        assert result.new_state is MeetingState.COMPLETED
        stored = await meeting_repo.get(meeting.id)
        assert stored.score == 17.33
        assert stored.juries_scores == {10: 18.0, 11: 16.5, 12: 17.5}
        assert notifier.events_for(meeting.id)[-1] is NotificationEvent.MEETING_COMPLETED

    @pytest.mark.asyncio
    async def test_cancel(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        notifier: WorkflowNotifierStub,
        meeting: Meeting,
    ) -> None:
        await meeting_service.transition(meeting.id, CancelMeeting(actor=ADMIN, reason="Withdrawn"))
        assert (await meeting_repo.get(meeting.id)).state is MeetingState.CANCELED
        assert len(notifier.sent_to(STUDENT.id)) == 1


class TestQueries:
    @pytest.mark.asyncio
    async def test_unknown_meeting(self, meeting_service: MeetingService) -> None:
        missing = make_meeting()
        with pytest.raises(MeetingNotFoundError) as exc_info:
            await meeting_service.get_meeting(missing.id)
        assert exc_info.value.meeting_id == missing.id

    @pytest.mark.asyncio
    async def test_meeting_for_form(
        self, meeting_service: MeetingService, meeting: Meeting
    ) -> None:
        assert await meeting_service.get_meeting_for_form(meeting.thesis_form_id) == meeting
        other = make_meeting()
        with pytest.raises(MeetingNotFoundError) as exc_info:
            await meeting_service.get_meeting_for_form(other.thesis_form_id)
        assert exc_info.value.form_id == other.thesis_form_id

    @pytest.mark.asyncio
    async def test_list_meetings_for_participants(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        meeting: Meeting,
    ) -> None:
        other = make_meeting(jury_ids=(10, 12))
        await meeting_repo.save(other, None)

        assert len(await meeting_service.list_meetings_for(STUDENT.id)) == 2
        assert await meeting_service.list_meetings_for(PROFESSOR_A.id) == [meeting]
        assert await meeting_service.list_meetings_for(ADMIN.id) == []

    @pytest.mark.asyncio
    async def test_available_actions(
        self, meeting_service: MeetingService, meeting: Meeting
    ) -> None:
        assert await meeting_service.available_actions(meeting.id, PROFESSOR_A) == [
            "SUBMIT_AVAILABILITY"
        ]
        assert await meeting_service.available_actions(meeting.id, ADMIN) == ["CANCEL"]
        assert await meeting_service.available_actions(meeting.id, STUDENT) == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_repository_failure_wrapped(
        self,
        notifier: WorkflowNotifierStub,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        meeting = make_meeting()
        repo = AsyncMock()
        repo.get.return_value = meeting
        repo.save.side_effect = OSError("disk full")
        service = MeetingService(repo, notifier, fake_time_authority)

        with pytest.raises(CollaboratorError) as exc_info:
            await service.transition(
                meeting.id, SubmitAvailability(actor=PROFESSOR_A, time_slots=(slot(6),))
            )

        assert exc_info.value.operation == "meeting_repo.save"
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_stale_meeting_conflicts(
        self,
        meeting_service: MeetingService,
        meeting_repo: MeetingRepositoryStub,
        meeting: Meeting,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        await meeting_service.transition(
            meeting.id, SubmitAvailability(actor=INSTRUCTOR, time_slots=(slot(6),))
        )
        monkeypatch.setattr(meeting_repo, "get", AsyncMock(return_value=meeting))

        with pytest.raises(ConcurrentModificationError) as exc_info:
            await meeting_service.transition(
                meeting.id, SubmitAvailability(actor=PROFESSOR_A, time_slots=(slot(7),))
            )
        assert exc_info.value.entity_type == "meeting"

    @pytest.mark.asyncio
    async def test_notifier_failure_is_logged_not_raised(
        self,
        meeting_repo: MeetingRepositoryStub,
        fake_time_authority: FakeTimeAuthority,
        meeting: Meeting,
    ) -> None:
        notifier = AsyncMock()
        notifier.notify.side_effect = RuntimeError("queue full")
        service = MeetingService(meeting_repo, notifier, fake_time_authority)

        result = await service.transition(meeting.id, CancelMeeting(actor=MANAGER))

        assert result.new_state is MeetingState.CANCELED
        assert (await meeting_repo.get(meeting.id)).state is MeetingState.CANCELED
