"""Unit tests for the thesis form review state machine."""

from datetime import datetime, timezone

import pytest

from src.config.defense_config import TEST_DEFENSE_WORKFLOW_CONFIG
from src.domain.errors import (
    AlreadyTerminalError,
    InvalidTransitionError,
    NotAuthorizedError,
    ValidationError,
)
from src.domain.models.actions import (
    ApproveForm,
    EditFormContent,
    FormActionKind,
    RejectForm,
    RequestRevision,
    SubmitRevision,
)
from src.domain.models.meeting import MeetingState
from src.domain.models.thesis_form import FORM_TERMINAL_STATES, FormState, RevisionTarget
from src.domain.models.transition import (
    CreateMeeting,
    NotificationEvent,
    NotifyParticipants,
    PersistForm,
)
from src.domain.models.user import Actor, Role, SimpleUser
from src.domain.services.thesis_form_state_machine import (
    FORM_TRANSITIONS,
    FormParty,
    actor_parties,
    available_form_actions,
    awaiting_party,
    create_thesis_form,
    decide_form_transition,
    revision_targets_for,
)
from tests.helpers.workflow_factories import (
    ABSTRACT,
    ADMIN,
    INSTRUCTOR,
    MANAGER,
    PROFESSOR_A,
    STUDENT,
    TITLE,
    make_form,
)

NOW = datetime(2026, 3, 5, 14, 0, tzinfo=timezone.utc)
REASON = "Topic duplicates an existing thesis"
MESSAGE = "Please clarify abstract scope"

# Scenario C roster: the instructor plus professors 7 and 9
SCENARIO_ROSTER = {
    10: SimpleUser(10, "Ada", "Instructor"),
    7: SimpleUser(7, "Gus", "Seven"),
    9: SimpleUser(9, "Ivy", "Nine"),
}


def decide(form, action, **kwargs):
    return decide_form_transition(form, action, now=NOW, **kwargs)


class TestCreateThesisForm:
    def test_student_creates_submitted_form(self) -> None:
        result = create_thesis_form(
            STUDENT,
            title=f"  {TITLE}  ",
            abstract_text=ABSTRACT,
            instructor_id=INSTRUCTOR.id,
            field_id=3,
            now=NOW,
        )
        form = result.entity
        assert form.state is FormState.SUBMITTED
        assert form.title == TITLE
        assert form.student_id == STUDENT.id
        assert form.submitted_at == NOW
        assert form.version == 1

    def test_creation_persists_and_notifies_instructor(self) -> None:
        result = create_thesis_form(
            STUDENT,
            title=TITLE,
            abstract_text=ABSTRACT,
            instructor_id=INSTRUCTOR.id,
            field_id=3,
            now=NOW,
        )
        persist, notice = result.side_effects
        assert isinstance(persist, PersistForm)
        assert persist.expected_version is None
        assert isinstance(notice, NotifyParticipants)
        assert notice.event is NotificationEvent.FORM_SUBMITTED
        assert notice.recipient_ids == (INSTRUCTOR.id,)

    def test_only_students_create_forms(self) -> None:
        with pytest.raises(NotAuthorizedError):
            create_thesis_form(
                INSTRUCTOR,
                title=TITLE,
                abstract_text=ABSTRACT,
                instructor_id=INSTRUCTOR.id,
                field_id=3,
                now=NOW,
            )

    @pytest.mark.parametrize(
        ("title", "abstract_text", "field"),
        [
            ("Too short", ABSTRACT, "title"),
            ("x" * 201, ABSTRACT, "title"),
            (TITLE, "Short abstract", "abstract_text"),
            (TITLE, "   " + "a" * 49 + "   ", "abstract_text"),
        ],
    )
    def test_content_bounds(self, title: str, abstract_text: str, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            create_thesis_form(
                STUDENT,
                title=title,
                abstract_text=abstract_text,
                instructor_id=INSTRUCTOR.id,
                field_id=3,
                now=NOW,
            )
        assert exc_info.value.field == field


class TestInstructorReview:
    def test_scenario_a_instructor_approves(self) -> None:
        form = make_form()
        result = decide(form, ApproveForm(actor=INSTRUCTOR))

        assert result.previous_state is FormState.SUBMITTED
        assert result.new_state is FormState.INSTRUCTOR_APPROVED
        assert result.entity.instructor_reviewed_at == NOW
        assert {"state", "instructor_reviewed_at", "updated_at"} <= result.updated_fields
        assert "version" not in result.updated_fields

    def test_scenario_a_other_professor_not_authorized(self) -> None:
        with pytest.raises(NotAuthorizedError) as exc_info:
            decide(make_form(), ApproveForm(actor=PROFESSOR_A))
        assert exc_info.value.actor_id == PROFESSOR_A.id

    def test_manager_supervising_acts_as_instructor(self) -> None:
        form = make_form(instructor_id=MANAGER.id)
        result = decide(form, ApproveForm(actor=MANAGER))
        assert result.new_state is FormState.INSTRUCTOR_APPROVED

    def test_approval_notifies_student_and_next_reviewer(self) -> None:
        result = decide(make_form(), ApproveForm(actor=INSTRUCTOR))
        notices = result.effects_of_type(NotifyParticipants)
        assert [notice.event for notice in notices] == [
            NotificationEvent.FORM_APPROVED,
            NotificationEvent.FORM_SUBMITTED,
        ]
        assert notices[1].recipient_roles == (Role.ADMIN,)

    def test_persist_carries_expected_version(self) -> None:
        form = make_form(version=4)
        result = decide(form, ApproveForm(actor=INSTRUCTOR))
        persist = result.side_effects[0]
        assert isinstance(persist, PersistForm)
        assert persist.expected_version == 4
        assert persist.form.version == 5

    def test_reject_requires_reason(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            decide(make_form(), RejectForm(actor=INSTRUCTOR, reason="too short"))
        assert exc_info.value.field == "reason"

    def test_reject_sets_reason(self) -> None:
        result = decide(make_form(), RejectForm(actor=INSTRUCTOR, reason=f" {REASON} "))
        assert result.new_state is FormState.INSTRUCTOR_REJECTED
        assert result.entity.rejection_reason == REASON
        assert result.entity.is_terminal

    def test_scenario_b_revision_round_trip(self) -> None:
        requested = decide(
            make_form(),
            RequestRevision(actor=INSTRUCTOR, target=RevisionTarget.STUDENT, message=MESSAGE),
        )
        assert requested.new_state is FormState.INSTRUCTOR_REVISION_REQUESTED
        assert requested.entity.revision_message == MESSAGE
        assert requested.entity.revision_requested_at == NOW

        resubmitted = decide(requested.entity, SubmitRevision(actor=STUDENT))
        assert resubmitted.new_state is FormState.SUBMITTED
        assert resubmitted.entity.revision_message is None
        assert resubmitted.entity.submitted_at == NOW

    def test_instructor_cannot_target_admin(self) -> None:
        with pytest.raises(InvalidTransitionError, match="not allowed"):
            decide(
                make_form(),
                RequestRevision(actor=INSTRUCTOR, target=RevisionTarget.ADMIN, message=MESSAGE),
            )

    def test_revision_message_minimum(self) -> None:
        with pytest.raises(ValidationError):
            decide(
                make_form(),
                RequestRevision(actor=INSTRUCTOR, target=RevisionTarget.STUDENT, message="fix"),
            )

    def test_instructor_may_reject_while_waiting_on_student(self) -> None:
        form = make_form(FormState.INSTRUCTOR_REVISION_REQUESTED)
        result = decide(form, RejectForm(actor=INSTRUCTOR, reason=REASON))
        assert result.new_state is FormState.INSTRUCTOR_REJECTED
        assert result.entity.revision_message is None

    def test_instructor_may_reforward_to_student(self) -> None:
        form = make_form(FormState.INSTRUCTOR_REVISION_REQUESTED)
        result = decide(
            form,
            RequestRevision(
                actor=INSTRUCTOR,
                target=RevisionTarget.STUDENT,
                message="Also update the bibliography",
            ),
        )
        assert result.new_state is FormState.INSTRUCTOR_REVISION_REQUESTED
        assert result.entity.revision_message == "Also update the bibliography"

    def test_identical_reforward_at_same_instant_is_noop(self) -> None:
        form = make_form(
            FormState.INSTRUCTOR_REVISION_REQUESTED,
            revision_message=MESSAGE,
            revision_requested_at=NOW,
            instructor_reviewed_at=NOW,
            updated_at=NOW,
        )
        result = decide(
            form,
            RequestRevision(actor=INSTRUCTOR, target=RevisionTarget.STUDENT, message=MESSAGE),
        )
        assert result.entity is form
        assert not result.changed
        assert result.side_effects == ()

    def test_approve_not_possible_while_waiting_on_student(self) -> None:
        form = make_form(FormState.INSTRUCTOR_REVISION_REQUESTED)
        with pytest.raises(InvalidTransitionError):
            decide(form, ApproveForm(actor=INSTRUCTOR))


class TestAdminReview:
    def test_admin_approves(self) -> None:
        form = make_form(FormState.INSTRUCTOR_APPROVED)
        result = decide(form, ApproveForm(actor=ADMIN))
        assert result.new_state is FormState.ADMIN_APPROVED
        assert result.entity.admin_reviewed_at == NOW

    @pytest.mark.parametrize(
        ("target", "state", "resumer"),
        [
            (RevisionTarget.STUDENT, FormState.ADMIN_REVISION_REQUESTED_FOR_STUDENT, STUDENT),
            (
                RevisionTarget.INSTRUCTOR,
                FormState.ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR,
                INSTRUCTOR,
            ),
        ],
    )
    def test_admin_revision_resumes_at_instructor_approved(
        self, target: RevisionTarget, state: FormState, resumer: Actor
    ) -> None:
        form = make_form(FormState.INSTRUCTOR_APPROVED)
        requested = decide(form, RequestRevision(actor=ADMIN, target=target, message=MESSAGE))
        assert requested.new_state is state

        resumed = decide(requested.entity, SubmitRevision(actor=resumer))
        assert resumed.new_state is FormState.INSTRUCTOR_APPROVED

    def test_student_cannot_submit_instructor_revision(self) -> None:
        form = make_form(FormState.ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR)
        with pytest.raises(NotAuthorizedError):
            decide(form, SubmitRevision(actor=STUDENT))

    def test_professor_cannot_act_as_admin(self) -> None:
        form = make_form(FormState.INSTRUCTOR_APPROVED)
        with pytest.raises(NotAuthorizedError):
            decide(form, ApproveForm(actor=INSTRUCTOR))


class TestManagerReview:
    def test_scenario_c_manager_approval_creates_meeting(self) -> None:
        form = make_form(FormState.ADMIN_APPROVED)
        result = decide(
            form,
            ApproveForm(actor=MANAGER, jury_ids=(INSTRUCTOR.id, 7, 9)),
            jury_roster=SCENARIO_ROSTER,
        )

        assert result.new_state is FormState.MANAGER_APPROVED
        assert result.entity.manager_reviewed_at == NOW
        (create,) = result.effects_of_type(CreateMeeting)
        meeting = create.meeting
        assert meeting.state is MeetingState.JURIES_SELECTED
        assert meeting.jury_ids == (INSTRUCTOR.id, 7, 9)
        assert meeting.thesis_form_id == form.id
        assert meeting.student_id == STUDENT.id

    def test_meeting_notice_addresses_student_and_jury(self) -> None:
        result = decide(
            make_form(FormState.ADMIN_APPROVED),
            ApproveForm(actor=MANAGER, jury_ids=(INSTRUCTOR.id, 7, 9)),
            jury_roster=SCENARIO_ROSTER,
        )
        notices = result.effects_of_type(NotifyParticipants)
        meeting_notice = next(n for n in notices if n.event is NotificationEvent.MEETING_CREATED)
        assert set(meeting_notice.recipient_ids) == {STUDENT.id, INSTRUCTOR.id, 7, 9}

    def test_side_effects_order(self) -> None:
        result = decide(
            make_form(FormState.ADMIN_APPROVED),
            ApproveForm(actor=MANAGER, jury_ids=(INSTRUCTOR.id, 7, 9)),
            jury_roster=SCENARIO_ROSTER,
        )
        assert isinstance(result.side_effects[0], PersistForm)
        assert isinstance(result.side_effects[1], CreateMeeting)

    @pytest.mark.parametrize(
        "jury_ids",
        [
            (),
            (INSTRUCTOR.id, 7),
            (7, 9, 9),
            (7, 9, 11),
        ],
    )
    def test_invalid_jury_leaves_form_unchanged(self, jury_ids: tuple[int, ...]) -> None:
        form = make_form(FormState.ADMIN_APPROVED)
        with pytest.raises(ValidationError) as exc_info:
            decide(form, ApproveForm(actor=MANAGER, jury_ids=jury_ids), jury_roster=SCENARIO_ROSTER)
        assert exc_info.value.field == "jury_ids"
        assert form.state is FormState.ADMIN_APPROVED

    def test_jury_must_come_from_roster(self) -> None:
        with pytest.raises(ValidationError, match="not professors"):
            decide(
                make_form(FormState.ADMIN_APPROVED),
                ApproveForm(actor=MANAGER, jury_ids=(INSTRUCTOR.id, 7, 42)),
                jury_roster=SCENARIO_ROSTER,
            )

    def test_jury_maximum_from_config(self) -> None:
        roster = {i: SimpleUser(i, "P", str(i)) for i in (10, 11, 12, 13, 14, 15)}
        with pytest.raises(ValidationError, match="between 2 and 5"):
            decide(
                make_form(FormState.ADMIN_APPROVED),
                ApproveForm(actor=MANAGER, jury_ids=tuple(roster)),
                jury_roster=roster,
                config=TEST_DEFENSE_WORKFLOW_CONFIG,
            )

    def test_jury_only_at_manager_tier(self) -> None:
        with pytest.raises(ValidationError, match="manager"):
            decide(make_form(), ApproveForm(actor=INSTRUCTOR, jury_ids=(7, 9)))

    @pytest.mark.parametrize(
        ("target", "state", "resumer", "resumed_state"),
        [
            (
                RevisionTarget.STUDENT,
                FormState.MANAGER_REVISION_REQUESTED_FOR_STUDENT,
                STUDENT,
                FormState.SUBMITTED,
            ),
            (
                RevisionTarget.INSTRUCTOR,
                FormState.MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR,
                INSTRUCTOR,
                FormState.INSTRUCTOR_APPROVED,
            ),
            (
                RevisionTarget.ADMIN,
                FormState.MANAGER_REVISION_REQUESTED_FOR_ADMIN,
                ADMIN,
                FormState.ADMIN_APPROVED,
            ),
        ],
    )
    def test_manager_revision_loops(
        self,
        target: RevisionTarget,
        state: FormState,
        resumer: Actor,
        resumed_state: FormState,
    ) -> None:
        form = make_form(FormState.ADMIN_APPROVED)
        requested = decide(form, RequestRevision(actor=MANAGER, target=target, message=MESSAGE))
        assert requested.new_state is state
        assert requested.entity.manager_reviewed_at == NOW

        resumed = decide(requested.entity, SubmitRevision(actor=resumer))
        assert resumed.new_state is resumed_state


class TestEditContent:
    def test_student_edits_without_state_change(self) -> None:
        form = make_form(FormState.ADMIN_REVISION_REQUESTED_FOR_STUDENT)
        result = decide(
            form,
            EditFormContent(
                actor=STUDENT,
                title="A narrower thesis title",
                abstract_text=ABSTRACT,
                instructor_id=INSTRUCTOR.id,
            ),
        )
        assert result.new_state is FormState.ADMIN_REVISION_REQUESTED_FOR_STUDENT
        assert result.entity.title == "A narrower thesis title"
        assert result.updated_fields == {"title", "updated_at"}

    def test_identical_edit_is_noop(self) -> None:
        form = make_form()
        result = decide(
            form,
            EditFormContent(
                actor=STUDENT, title=TITLE, abstract_text=ABSTRACT, instructor_id=INSTRUCTOR.id
            ),
        )
        assert result.entity is form
        assert not result.changed
        assert result.side_effects == ()

    def test_edit_not_allowed_after_instructor_approval(self) -> None:
        with pytest.raises(InvalidTransitionError):
            decide(
                make_form(FormState.INSTRUCTOR_APPROVED),
                EditFormContent(
                    actor=STUDENT, title=TITLE, abstract_text=ABSTRACT, instructor_id=11
                ),
            )

    def test_other_student_cannot_edit(self) -> None:
        with pytest.raises(NotAuthorizedError):
            decide(
                make_form(),
                EditFormContent(
                    actor=Actor(2, Role.STUDENT),
                    title=TITLE,
                    abstract_text=ABSTRACT,
                    instructor_id=INSTRUCTOR.id,
                ),
            )


class TestTerminalAndTable:
    @pytest.mark.parametrize("state", sorted(FORM_TERMINAL_STATES, key=lambda s: s.value))
    def test_terminal_forms_reject_every_action(self, state: FormState) -> None:
        with pytest.raises(AlreadyTerminalError):
            decide(make_form(state), ApproveForm(actor=MANAGER))

    def test_unknown_transition_names_state_and_role(self) -> None:
        form = make_form(FormState.ADMIN_APPROVED)
        with pytest.raises(InvalidTransitionError) as exc_info:
            decide(form, SubmitRevision(actor=STUDENT))
        assert exc_info.value.current_state is FormState.ADMIN_APPROVED
        assert exc_info.value.actor_role is Role.STUDENT

    def test_table_check_precedes_authorization(self) -> None:
        # Wrong role on a missing cell reports the transition, not authorization
        with pytest.raises(InvalidTransitionError):
            decide(make_form(FormState.ADMIN_APPROVED), SubmitRevision(actor=PROFESSOR_A))

    def test_every_rule_targets_a_known_state(self) -> None:
        for (state, kind), rule in FORM_TRANSITIONS.items():
            assert not state.is_terminal()
            if kind is FormActionKind.REQUEST_REVISION:
                assert rule.revision_targets
            else:
                assert rule.to_state is not None


class TestQueries:
    def test_actor_parties(self) -> None:
        form = make_form(instructor_id=MANAGER.id)
        assert actor_parties(form, MANAGER) == {FormParty.INSTRUCTOR, FormParty.MANAGER}
        assert actor_parties(form, STUDENT) == {FormParty.STUDENT}
        assert actor_parties(form, Actor(2, Role.STUDENT)) == frozenset()

    @pytest.mark.parametrize(
        ("state", "party"),
        [
            (FormState.SUBMITTED, FormParty.INSTRUCTOR),
            (FormState.INSTRUCTOR_APPROVED, FormParty.ADMIN),
            (FormState.ADMIN_APPROVED, FormParty.MANAGER),
            (FormState.INSTRUCTOR_REVISION_REQUESTED, FormParty.STUDENT),
            (FormState.MANAGER_REVISION_REQUESTED_FOR_ADMIN, FormParty.ADMIN),
            (FormState.MANAGER_APPROVED, None),
        ],
    )
    def test_awaiting_party(self, state: FormState, party: FormParty | None) -> None:
        assert awaiting_party(state) is party

    def test_available_actions_for_instructor(self) -> None:
        actions = available_form_actions(make_form(), INSTRUCTOR)
        assert set(actions) == {
            FormActionKind.APPROVE,
            FormActionKind.REJECT,
            FormActionKind.REQUEST_REVISION,
        }

    def test_available_actions_for_student_on_revision(self) -> None:
        form = make_form(FormState.MANAGER_REVISION_REQUESTED_FOR_STUDENT)
        assert set(available_form_actions(form, STUDENT)) == {
            FormActionKind.SUBMIT_REVISION,
            FormActionKind.EDIT_CONTENT,
        }

    def test_no_actions_on_terminal_form(self) -> None:
        assert available_form_actions(make_form(FormState.MANAGER_APPROVED), MANAGER) == ()

    def test_revision_targets_for_manager(self) -> None:
        form = make_form(FormState.ADMIN_APPROVED)
        assert set(revision_targets_for(form, MANAGER)) == set(RevisionTarget)
        assert revision_targets_for(form, ADMIN) == ()
