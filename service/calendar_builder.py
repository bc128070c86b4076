"""
Calendar builder.

Expands a weekly ``CalendarConfig`` into the ordered period slots of every
working day. Break windows are cut out of the day and the surviving periods
are numbered from 1.
"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Dict, List, Tuple
import logging

from models.schemas import BreakWindow, CalendarConfig, PeriodSlot
from service.errors import InvalidCalendarError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotTable:
    """Immutable result of ``build_slots``."""

    days: Tuple[str, ...]
    slots_by_day: Dict[str, Tuple[PeriodSlot, ...]]
    breaks: Tuple[BreakWindow, ...] = ()

    def slots(self, day: str) -> Tuple[PeriodSlot, ...]:
        return self.slots_by_day.get(day, ())

    def slot(self, day: str, period_index: int) -> PeriodSlot:
        if period_index < 1:
            raise IndexError(f"Period index must start at 1, got {period_index}")
        return self.slots_by_day[day][period_index - 1]

    def all_slots(self) -> List[PeriodSlot]:
        return [slot for day in self.days for slot in self.slots_by_day[day]]

    def day_position(self, day: str) -> int:
        return self.days.index(day)

    @property
    def max_period_index(self) -> int:
        return max((len(s) for s in self.slots_by_day.values()), default=0)

    @staticmethod
    def is_adjacent(first: PeriodSlot, second: PeriodSlot) -> bool:
        """Consecutive indices on one day with no break between them."""
        return (
            first.day == second.day
            and second.period_index == first.period_index + 1
            and first.end_time == second.start_time
        )

    def adjacent_pairs(self, day: str) -> List[Tuple[PeriodSlot, PeriodSlot]]:
        day_slots = self.slots(day)
        return [
            (a, b) for a, b in zip(day_slots, day_slots[1:])
            if self.is_adjacent(a, b)
        ]


def build_slots(config: CalendarConfig) -> SlotTable:
    """
    Build the slot table for a calendar.

    Args:
        config: Weekly calendar structure

    Returns:
        SlotTable with the same period geometry on every working day

    Raises:
        InvalidCalendarError: If the calendar geometry is inconsistent
    """
    days = _validate_days(config.working_days)

    if config.period_duration <= 0:
        raise InvalidCalendarError("Period duration must be greater than 0 minutes")

    day_start = to_minutes(config.start_time, "day start")
    day_end = to_minutes(config.end_time, "day end")
    if day_end <= day_start:
        raise InvalidCalendarError(
            f"Day start time ({config.start_time}) must be before end time ({config.end_time})"
        )

    windows = _validate_breaks(config.breaks, day_start, day_end)

    # Walk the day, jumping over breaks
    intervals = []
    current = day_start
    while current + config.period_duration <= day_end:
        next_time = current + config.period_duration
        blocking = next(
            (w for w in windows if _times_overlap(current, next_time, w[0], w[1])),
            None
        )
        if blocking is not None:
            current = max(current, blocking[1])
            continue
        intervals.append((current, next_time))
        current = next_time

    if not intervals:
        logger.warning(
            f"Calendar {config.start_time}-{config.end_time} with "
            f"{config.period_duration}min periods yields no period slots"
        )

    slots_by_day = {}
    for day in days:
        slots_by_day[day] = tuple(
            PeriodSlot(
                day=day,
                period_index=idx,
                start_time=_minutes_to_str(start),
                end_time=_minutes_to_str(end)
            )
            for idx, (start, end) in enumerate(intervals, start=1)
        )

    logger.debug(f"Built {len(intervals)} periods/day over {len(days)} days")
    return SlotTable(days=days, slots_by_day=slots_by_day, breaks=tuple(config.breaks))


# ===========================
# Helper Methods
# ===========================

def _validate_days(working_days: List[str]) -> Tuple[str, ...]:
    if not working_days:
        raise InvalidCalendarError("At least one working day is required")
    seen = set()
    for day in working_days:
        if not day or not day.strip():
            raise InvalidCalendarError("Working day names must not be empty")
        if day in seen:
            raise InvalidCalendarError(f"Working day '{day}' is listed more than once")
        seen.add(day)
    return tuple(working_days)


def _validate_breaks(breaks: List[BreakWindow], day_start: int, day_end: int) -> List[Tuple[int, int]]:
    windows = []
    for window in breaks:
        start = to_minutes(window.start_time, f"break '{window.name}' start")
        end = to_minutes(window.end_time, f"break '{window.name}' end")
        if start >= end:
            raise InvalidCalendarError(
                f"Break '{window.name}': start time ({window.start_time}) must be before end time ({window.end_time})"
            )
        if start < day_start or end > day_end:
            raise InvalidCalendarError(
                f"Break '{window.name}' ({window.start_time}-{window.end_time}) lies outside the school day"
            )
        windows.append((start, end, window.name))

    windows.sort()
    for (s1, e1, n1), (s2, e2, n2) in zip(windows, windows[1:]):
        if _times_overlap(s1, e1, s2, e2):
            raise InvalidCalendarError(f"Breaks '{n1}' and '{n2}' overlap")

    return [(s, e) for s, e, _ in windows]


def _parse_time(time_str: str) -> time:
    """Parse HH:MM time string to time object."""
    return datetime.strptime(time_str, '%H:%M').time()


def to_minutes(time_str: str, label: str) -> int:
    try:
        t = _parse_time(time_str)
    except (TypeError, ValueError):
        raise InvalidCalendarError(
            f"Invalid {label} time '{time_str}'. Use HH:MM format (e.g., '09:30')"
        )
    return t.hour * 60 + t.minute


def _minutes_to_str(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _times_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Check if two half-open time ranges overlap."""
    return start1 < end2 and start2 < end1
