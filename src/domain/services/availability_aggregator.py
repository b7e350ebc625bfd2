"""Availability aggregation for defense time-slot negotiation.

Jury members submit the slots they can attend; the student may only pick
a slot every responding jury member offered. Members who have not yet
responded are left out of the intersection, so the student has options
before the whole jury has answered, and are reported as awaiting.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from uuid import UUID

from src.domain.models.meeting import Meeting
from src.domain.models.time_slot import TimePeriod, TimeSlot
from src.domain.models.user import SimpleUser


def normalize_slots(slots: Iterable[TimeSlot]) -> tuple[TimeSlot, ...]:
    """Deduplicate and sort a slot list chronologically."""
    return tuple(sorted(set(slots)))


def compute_intersection(
    submissions: Mapping[int, Iterable[TimeSlot]],
) -> list[TimeSlot]:
    """Slots present in every non-empty submission.

    Each list is deduplicated before counting, and a slot is kept when its
    count equals the number of members who submitted at least one slot.
    Zero submitters yields an empty list.

    Args:
        submissions: Jury member id -> that member's submitted slots.

    Returns:
        The intersecting slots in chronological order.
    """
    submitted = [set(slots) for slots in submissions.values()]
    submitted = [slots for slots in submitted if slots]
    if not submitted:
        return []

    counts: Counter[TimeSlot] = Counter()
    for slots in submitted:
        counts.update(slots)
    return sorted(slot for slot, count in counts.items() if count == len(submitted))


def group_by_date(slots: Iterable[TimeSlot]) -> dict[date, tuple[TimePeriod, ...]]:
    """Group slots into {date: periods}, both in chronological order."""
    grouped: dict[date, list[TimePeriod]] = {}
    for slot in normalize_slots(slots):
        grouped.setdefault(slot.date, []).append(slot.time_period)
    return {day: tuple(periods) for day, periods in grouped.items()}


@dataclass(frozen=True)
class MemberAvailability:
    """One jury member's submitted availability, for display."""

    member: SimpleUser
    time_slots: tuple[TimeSlot, ...]
    slots_by_date: Mapping[date, tuple[TimePeriod, ...]]

    @property
    def has_submitted(self) -> bool:
        return bool(self.time_slots)


@dataclass(frozen=True)
class AvailabilityReport:
    """Aggregated availability of a meeting's jury.

    Attributes:
        meeting_id: The meeting reported on.
        intersections: Slots the student may choose from.
        members: Per-member availability in roster order.
        awaiting_member_ids: Jury members who have not submitted yet.
    """

    meeting_id: UUID
    intersections: tuple[TimeSlot, ...]
    members: tuple[MemberAvailability, ...]
    awaiting_member_ids: tuple[int, ...] = field(default=())

    @property
    def submitted_count(self) -> int:
        return sum(1 for member in self.members if member.has_submitted)

    @property
    def is_partial(self) -> bool:
        """True while some jury members have not responded."""
        return bool(self.awaiting_member_ids)

    def is_intersection(self, slot: TimeSlot) -> bool:
        return slot in self.intersections


def build_availability_report(meeting: Meeting) -> AvailabilityReport:
    """Build the availability report for a meeting's current submissions."""
    members = []
    awaiting = []
    for member in meeting.jury_members:
        slots = normalize_slots(meeting.jury_time_slots.get(member.id, ()))
        if not slots:
            awaiting.append(member.id)
        members.append(
            MemberAvailability(
                member=member,
                time_slots=slots,
                slots_by_date=MappingProxyType(group_by_date(slots)),
            )
        )
    return AvailabilityReport(
        meeting_id=meeting.id,
        intersections=tuple(compute_intersection(meeting.jury_time_slots)),
        members=tuple(members),
        awaiting_member_ids=tuple(awaiting),
    )
