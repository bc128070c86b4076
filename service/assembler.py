"""
Schedule assembler.

Pure projections of an allocation result: entries grouped per class and per
teacher, summary counts, and the day x period grids used for rendering.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from models.schemas import (
    ClassSection, TeacherProfile, ScheduleEntry, Diagnostics, DataQualityWarning,
    ScheduleSummary, ClassFulfillment, ScheduleSlot, DaySchedule,
    ClassTimetable, TeacherRoster
)
from service.allocator import AllocationResult
from service.calendar_builder import SlotTable, to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleReport:
    entries: Tuple[ScheduleEntry, ...]
    schedule_by_class: Dict[str, List[ScheduleEntry]]
    schedule_by_teacher: Dict[str, List[ScheduleEntry]]
    diagnostics: Diagnostics
    summary: ScheduleSummary
    timed_out: bool = False


def assemble(result: AllocationResult, slot_table: SlotTable, classes: List[ClassSection],
             warnings: Tuple[DataQualityWarning, ...] = ()) -> ScheduleReport:
    """
    Group the allocator's entries and compute summary counts.

    Args:
        result: Final allocator state
        slot_table: Calendar slots, used for day ordering
        classes: Class sections, used to list classes with no entries too
        warnings: Data-quality warnings from the demand compiler

    Returns:
        ScheduleReport; calling this twice on the same result gives equal reports
    """
    order = _entry_order(slot_table)
    entries = tuple(sorted(result.entries, key=lambda e: (e.class_id,) + order(e)))

    by_class: Dict[str, List[ScheduleEntry]] = {c.class_id: [] for c in classes}
    by_teacher: Dict[str, List[ScheduleEntry]] = {}
    for entry in entries:
        by_class.setdefault(entry.class_id, []).append(entry)
        by_teacher.setdefault(entry.teacher_id, []).append(entry)
    for teacher_entries in by_teacher.values():
        teacher_entries.sort(key=order)

    summary = _summarize(result, classes)
    diagnostics = Diagnostics(unscheduled=list(result.unscheduled), warnings=list(warnings))

    return ScheduleReport(
        entries=entries,
        schedule_by_class=by_class,
        schedule_by_teacher=by_teacher,
        diagnostics=diagnostics,
        summary=summary,
        timed_out=result.timed_out
    )


def _summarize(result: AllocationResult, classes: List[ClassSection]) -> ScheduleSummary:
    requested: Dict[str, int] = {c.class_id: 0 for c in classes}
    for requirement in result.requirements:
        requested[requirement.class_id] = requested.get(requirement.class_id, 0) + requirement.size

    placed: Dict[str, int] = {}
    for entry in result.entries:
        placed[entry.class_id] = placed.get(entry.class_id, 0) + 1

    per_class = []
    for class_id, periods_requested in requested.items():
        periods_placed = placed.get(class_id, 0)
        percent = 100.0 if periods_requested == 0 else round(100.0 * periods_placed / periods_requested, 1)
        per_class.append(ClassFulfillment(
            class_id=class_id,
            periods_requested=periods_requested,
            periods_placed=periods_placed,
            fulfillment_percent=percent
        ))

    return ScheduleSummary(
        total_requirements=len(result.requirements),
        total_placed=len(result.placements),
        total_unplaced=len(result.unscheduled),
        total_periods_requested=sum(requested.values()),
        total_periods_placed=len(result.entries),
        classes=per_class
    )


def _entry_order(slot_table: SlotTable):
    positions = {day: idx for idx, day in enumerate(slot_table.days)}

    def key(entry: ScheduleEntry) -> Tuple[int, int]:
        return (positions.get(entry.day, len(positions)), entry.period_index)

    return key


# ===========================
# Grid / Roster Views
# ===========================

def class_grid(section: ClassSection, report: ScheduleReport, slot_table: SlotTable,
               teachers: Dict[str, TeacherProfile]) -> ClassTimetable:
    """Day x period grid of one class, free periods and breaks included."""
    cells = {(e.day, e.period_index): e for e in report.schedule_by_class.get(section.class_id, [])}

    def fill(slot: ScheduleSlot, entry: Optional[ScheduleEntry]):
        if entry is not None:
            teacher = teachers.get(entry.teacher_id)
            slot.subject = entry.subject
            slot.teacher_id = entry.teacher_id
            slot.teacher_name = teacher.name if teacher else None

    return ClassTimetable(
        class_id=section.class_id,
        class_name=section.name,
        timetable=_grid(slot_table, cells, fill)
    )


def teacher_roster(teacher: TeacherProfile, report: ScheduleReport, slot_table: SlotTable,
                   class_names: Dict[str, str]) -> TeacherRoster:
    """Day x period grid of one teacher showing which class they take."""
    assigned = report.schedule_by_teacher.get(teacher.teacher_id, [])
    cells = {(e.day, e.period_index): e for e in assigned}

    def fill(slot: ScheduleSlot, entry: Optional[ScheduleEntry]):
        if entry is not None:
            slot.subject = entry.subject
            slot.class_id = entry.class_id
            slot.class_name = class_names.get(entry.class_id)

    return TeacherRoster(
        teacher_id=teacher.teacher_id,
        teacher_name=teacher.name,
        assigned_periods=len(assigned),
        max_weekly_load=teacher.max_weekly_load,
        timetable=_grid(slot_table, cells, fill)
    )


def _grid(slot_table: SlotTable, cells: Dict[Tuple[str, int], ScheduleEntry], fill) -> List[DaySchedule]:
    timetable = []
    for day in slot_table.days:
        day_slots = []
        for period in slot_table.slots(day):
            slot = ScheduleSlot(
                day=day,
                start_time=period.start_time,
                end_time=period.end_time,
                period_index=period.period_index,
                break_=False
            )
            fill(slot, cells.get((day, period.period_index)))
            day_slots.append(slot)

        for window in slot_table.breaks:
            day_slots.append(ScheduleSlot(
                day=day,
                start_time=window.start_time,
                end_time=window.end_time,
                break_=True,
                break_name=window.name
            ))

        # Sort all slots by start time
        day_slots.sort(key=lambda s: to_minutes(s.start_time, "slot start"))
        timetable.append(DaySchedule(day=day, slots=day_slots))
    return timetable
