"""
Timetable generation engine.
"""
from .errors import (
    TimetableError,
    InvalidCalendarError,
    InvalidWorkloadError,
    UnknownTeacherError,
    SlotConflictError
)
from .calendar_builder import SlotTable, build_slots
from .demand_compiler import Requirement, CompiledDemand, compile_requirements
from .ledger import AvailabilityLedger
from .allocator import Allocator, AllocationResult, Placement, SolveBudget
from .assembler import ScheduleReport, assemble, class_grid, teacher_roster
from .timetable_scheduler import TimetableScheduler

__all__ = [
    "TimetableError",
    "InvalidCalendarError",
    "InvalidWorkloadError",
    "UnknownTeacherError",
    "SlotConflictError",
    "SlotTable",
    "build_slots",
    "Requirement",
    "CompiledDemand",
    "compile_requirements",
    "AvailabilityLedger",
    "Allocator",
    "AllocationResult",
    "Placement",
    "SolveBudget",
    "ScheduleReport",
    "assemble",
    "class_grid",
    "teacher_roster",
    "TimetableScheduler"
]
