"""Time slot value type for defense availability and scheduling.

A slot is a calendar date plus one of five fixed teaching periods. Slots
are used both as jury-submitted availability and as the final scheduled
slot of a meeting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any


class TimePeriod(Enum):
    """The five fixed defense periods of a day.

    String spellings are a contract with persistence and must not change.
    """

    PERIOD_7_30_9_00 = "PERIOD_7_30_9_00"
    PERIOD_9_00_10_30 = "PERIOD_9_00_10_30"
    PERIOD_10_30_12_00 = "PERIOD_10_30_12_00"
    PERIOD_13_30_15_00 = "PERIOD_13_30_15_00"
    PERIOD_15_30_17_00 = "PERIOD_15_30_17_00"

    @property
    def start(self) -> time:
        return _PERIOD_BOUNDS[self][0]

    @property
    def end(self) -> time:
        return _PERIOD_BOUNDS[self][1]

    @property
    def label(self) -> str:
        """Display label, e.g. '9:00 - 10:30'."""
        return f"{_format_time(self.start)} - {_format_time(self.end)}"

    @property
    def order(self) -> int:
        """Position of the period within the day (0-based)."""
        return _PERIOD_ORDER[self]


_PERIOD_BOUNDS: dict[TimePeriod, tuple[time, time]] = {
    TimePeriod.PERIOD_7_30_9_00: (time(7, 30), time(9, 0)),
    TimePeriod.PERIOD_9_00_10_30: (time(9, 0), time(10, 30)),
    TimePeriod.PERIOD_10_30_12_00: (time(10, 30), time(12, 0)),
    TimePeriod.PERIOD_13_30_15_00: (time(13, 30), time(15, 0)),
    TimePeriod.PERIOD_15_30_17_00: (time(15, 30), time(17, 0)),
}

_PERIOD_ORDER: dict[TimePeriod, int] = {
    period: index for index, period in enumerate(TimePeriod)
}


def _format_time(value: time) -> str:
    return f"{value.hour}:{value.minute:02d}"


@dataclass(frozen=True, eq=True)
class TimeSlot:
    """An immutable (date, period) pair.

    Two slots are equal iff both fields match; slots are hashable so they
    can be counted and intersected as set members. Ordering is
    chronological (date first, then period within the day).

    Attributes:
        date: Calendar date of the slot.
        time_period: Period within that date.
    """

    date: date
    time_period: TimePeriod

    def __post_init__(self) -> None:
        """Validate slot fields."""
        # datetime subclasses date but never equals the plain date of its day
        if isinstance(self.date, datetime) or not isinstance(self.date, date):
            raise TypeError(f"date must be a datetime.date, got {type(self.date).__name__}")
        if not isinstance(self.time_period, TimePeriod):
            raise TypeError(
                f"time_period must be a TimePeriod, got {type(self.time_period).__name__}"
            )

    def sort_key(self) -> tuple[date, int]:
        return (self.date, self.time_period.order)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TimeSlot):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the ISO date spelling used by persistence."""
        return {"date": self.date.isoformat(), "timePeriod": self.time_period.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeSlot:
        """Deserialize from {"date": "YYYY-MM-DD", "timePeriod": "PERIOD_..."}.

        Raises:
            ValueError: If the date or period spelling is unknown.
            KeyError: If a field is missing.
        """
        return cls(
            date=date.fromisoformat(data["date"]),
            time_period=TimePeriod(data["timePeriod"]),
        )
