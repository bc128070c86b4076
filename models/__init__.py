"""
Data models and Pydantic schemas for the timetable API.
"""
from .schemas import (
    BreakWindow,
    CalendarConfig,
    PeriodSlot,
    TeacherProfile,
    SubjectDemand,
    ClassSection,
    ScheduleEntry,
    UnscheduledReason,
    UnscheduledRequirement,
    WarningCode,
    DataQualityWarning,
    Diagnostics,
    SolverOptions,
    SchedulingRequest,
    ScheduleSlot,
    DaySchedule,
    ClassTimetable,
    TeacherRoster,
    ClassFulfillment,
    ScheduleSummary,
    Messages,
    ErrorMessage,
    SchedulingResponse,
    SlotTableResponse,
    PresetResponse
)

__all__ = [
    "BreakWindow",
    "CalendarConfig",
    "PeriodSlot",
    "TeacherProfile",
    "SubjectDemand",
    "ClassSection",
    "ScheduleEntry",
    "UnscheduledReason",
    "UnscheduledRequirement",
    "WarningCode",
    "DataQualityWarning",
    "Diagnostics",
    "SolverOptions",
    "SchedulingRequest",
    "ScheduleSlot",
    "DaySchedule",
    "ClassTimetable",
    "TeacherRoster",
    "ClassFulfillment",
    "ScheduleSummary",
    "Messages",
    "ErrorMessage",
    "SchedulingResponse",
    "SlotTableResponse",
    "PresetResponse"
]
