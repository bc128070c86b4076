"""
Availability ledger: occupancy and remaining load for one solve.
"""

from typing import Dict, List, Optional, Tuple
import logging

from models.schemas import ScheduleEntry, TeacherProfile
from service.errors import SlotConflictError, UnknownTeacherError

logger = logging.getLogger(__name__)

SlotKey = Tuple[str, int]  # (day, period_index)


class AvailabilityLedger:
    """
    Mutable occupancy state of a single solve.

    Keyed by id, then by (day, period_index). Not thread-safe; every solve
    creates its own instance.
    """

    def __init__(self, teachers: List[TeacherProfile]):
        self._profiles: Dict[str, TeacherProfile] = {t.teacher_id: t for t in teachers}
        self._class_slots: Dict[str, Dict[SlotKey, ScheduleEntry]] = {}
        self._teacher_slots: Dict[str, Dict[SlotKey, ScheduleEntry]] = {
            t.teacher_id: {} for t in teachers
        }
        self._remaining: Dict[str, int] = {t.teacher_id: t.max_weekly_load for t in teachers}
        self._daily: Dict[str, Dict[str, int]] = {t.teacher_id: {} for t in teachers}
        self._entries: List[ScheduleEntry] = []

    def is_class_free(self, class_id: str, day: str, period_index: int) -> bool:
        return (day, period_index) not in self._class_slots.get(class_id, {})

    def is_teacher_free(self, teacher_id: str, day: str, period_index: int) -> bool:
        return (day, period_index) not in self._teacher_slots_of(teacher_id)

    def remaining_load(self, teacher_id: str) -> int:
        self._profile(teacher_id)
        return self._remaining[teacher_id]

    def teacher_day_load(self, teacher_id: str, day: str) -> int:
        self._profile(teacher_id)
        return self._daily[teacher_id].get(day, 0)

    def can_teach(self, teacher_id: str, day: str, cost: int) -> bool:
        """Check weekly and daily ceilings for ``cost`` more periods on ``day``."""
        profile = self._profile(teacher_id)
        if self._remaining[teacher_id] < cost:
            return False
        if profile.max_daily_load is not None:
            return self._daily[teacher_id].get(day, 0) + cost <= profile.max_daily_load
        return True

    def entry_at(self, class_id: str, day: str, period_index: int) -> Optional[ScheduleEntry]:
        return self._class_slots.get(class_id, {}).get((day, period_index))

    @property
    def entries(self) -> List[ScheduleEntry]:
        """Placed entries in placement order."""
        return list(self._entries)

    def place(self, entry: ScheduleEntry):
        key = (entry.day, entry.period_index)
        teacher_slots = self._teacher_slots_of(entry.teacher_id)

        if not self.is_class_free(entry.class_id, *key):
            raise SlotConflictError(
                f"Class {entry.class_id} already has a period on {entry.day} #{entry.period_index}"
            )
        if key in teacher_slots:
            raise SlotConflictError(
                f"Teacher {entry.teacher_id} is already teaching on {entry.day} #{entry.period_index}"
            )
        if self._remaining[entry.teacher_id] < 1:
            raise SlotConflictError(f"Teacher {entry.teacher_id} has no weekly load left")

        self._class_slots.setdefault(entry.class_id, {})[key] = entry
        teacher_slots[key] = entry
        self._remaining[entry.teacher_id] -= 1
        daily = self._daily[entry.teacher_id]
        daily[entry.day] = daily.get(entry.day, 0) + 1
        self._entries.append(entry)

    def unplace(self, entry: ScheduleEntry):
        key = (entry.day, entry.period_index)
        if self._class_slots.get(entry.class_id, {}).get(key) != entry:
            raise SlotConflictError(
                f"Class {entry.class_id} has no {entry.subject} on {entry.day} #{entry.period_index}"
            )

        del self._class_slots[entry.class_id][key]
        del self._teacher_slots[entry.teacher_id][key]
        self._remaining[entry.teacher_id] += 1
        self._daily[entry.teacher_id][entry.day] -= 1
        self._entries.remove(entry)

    def _profile(self, teacher_id: str) -> TeacherProfile:
        try:
            return self._profiles[teacher_id]
        except KeyError:
            raise UnknownTeacherError(teacher_id)

    def _teacher_slots_of(self, teacher_id: str) -> Dict[SlotKey, ScheduleEntry]:
        self._profile(teacher_id)
        return self._teacher_slots[teacher_id]
