from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


# ===========================
# Calendar Models
# ===========================

class BreakWindow(BaseModel):
    """Named time window excluded from period slots"""
    name: str = "Break"
    start_time: str  # HH:MM format, e.g., "12:45"
    end_time: str    # HH:MM format

    class Config:
        frozen = True


class CalendarConfig(BaseModel):
    """Weekly structure the period slots are derived from"""
    working_days: List[str]  # ordered, e.g. ["MON", "TUE", "WED"]
    start_time: str          # HH:MM format
    end_time: str
    period_duration: int     # minutes per period
    breaks: List[BreakWindow] = []

    class Config:
        frozen = True


class PeriodSlot(BaseModel):
    """One addressable period on a given day (1-based index, breaks excluded)"""
    day: str
    period_index: int
    start_time: str
    end_time: str

    class Config:
        frozen = True


# ===========================
# Teacher / Class Models
# ===========================

class TeacherProfile(BaseModel):
    teacher_id: str
    name: str
    max_weekly_load: int                   # periods per week ceiling
    max_daily_load: Optional[int] = None   # periods per day ceiling, None = no cap
    subjects: List[str] = []               # used to pick a teacher for unpinned subjects

    class Config:
        frozen = True


class SubjectDemand(BaseModel):
    """Weekly workload of one subject in one class"""
    subject: str
    periods_per_week: int
    is_double: bool = False               # consumed in pairs of contiguous slots
    teacher_id: Optional[str] = None      # pinned teacher

    class Config:
        frozen = True


class ClassSection(BaseModel):
    class_id: str
    name: str
    subjects: List[SubjectDemand] = []

    class Config:
        frozen = True


# ===========================
# Engine Output
# ===========================

class ScheduleEntry(BaseModel):
    """One period of one class, the canonical output row"""
    class_id: str
    day: str
    period_index: int
    subject: str
    teacher_id: str

    class Config:
        frozen = True


class UnscheduledReason(str, Enum):
    NO_SLOT_AVAILABLE = "NO_SLOT_AVAILABLE"
    TEACHER_LOAD_EXCEEDED = "TEACHER_LOAD_EXCEEDED"
    NO_CONTIGUOUS_PAIR = "NO_CONTIGUOUS_PAIR"
    NOT_ATTEMPTED = "NOT_ATTEMPTED"


class UnscheduledRequirement(BaseModel):
    """A requirement unit the allocator could not place"""
    class_id: str
    subject: str
    units_requested: int  # periods the unit needed (1 or 2)
    units_placed: int = 0
    reason: UnscheduledReason

    class Config:
        frozen = True


class WarningCode(str, Enum):
    ODD_DOUBLE_PERIOD_COUNT = "ODD_DOUBLE_PERIOD_COUNT"
    ZERO_PERIODS = "ZERO_PERIODS"


class DataQualityWarning(BaseModel):
    """Non-blocking input problem"""
    class_id: str
    subject: str
    code: WarningCode
    message: str

    class Config:
        frozen = True


class Diagnostics(BaseModel):
    unscheduled: List[UnscheduledRequirement] = []
    warnings: List[DataQualityWarning] = []


# ===========================
# Request Schema
# ===========================

class SolverOptions(BaseModel):
    """Per-request overrides of the solver settings; None keeps the configured value"""
    time_limit_seconds: Optional[float] = Field(default=None, ge=0)  # 0 = no limit
    max_requirements: Optional[int] = None
    backtracking: Optional[bool] = None
    max_relocations: Optional[int] = None


class SchedulingRequest(BaseModel):
    """Complete timetable generation request"""
    calendar: CalendarConfig
    teachers: List[TeacherProfile]
    classes: List[ClassSection]
    options: SolverOptions = SolverOptions()


# ===========================
# Response Schema
# ===========================

class ScheduleSlot(BaseModel):
    """Individual cell in a class grid or teacher roster"""
    day: str
    start_time: str
    end_time: str
    break_: bool = Field(default=False, alias="break")  # "break" is Python keyword
    break_name: Optional[str] = None
    period_index: Optional[int] = None  # None for break rows
    subject: Optional[str] = None
    teacher_id: Optional[str] = None
    teacher_name: Optional[str] = None
    class_id: Optional[str] = None
    class_name: Optional[str] = None

    class Config:
        populate_by_name = True  # Allow both "break" and "break_"


class DaySchedule(BaseModel):
    """Schedule for a single day"""
    day: str
    slots: List[ScheduleSlot]


class ClassTimetable(BaseModel):
    class_id: str
    class_name: str
    timetable: List[DaySchedule]


class TeacherRoster(BaseModel):
    teacher_id: str
    teacher_name: str
    assigned_periods: int
    max_weekly_load: int
    timetable: List[DaySchedule]


class ClassFulfillment(BaseModel):
    class_id: str
    periods_requested: int
    periods_placed: int
    fulfillment_percent: float


class ScheduleSummary(BaseModel):
    total_requirements: int
    total_placed: int
    total_unplaced: int
    total_periods_requested: int
    total_periods_placed: int
    classes: List[ClassFulfillment] = []


class ErrorMessage(BaseModel):
    """Error or warning message"""
    title: str
    message: str


class Messages(BaseModel):
    """Collection of error/warning messages"""
    error_message: List[ErrorMessage] = []


class SchedulingResponse(BaseModel):
    """Complete timetable generation response"""
    entries: List[ScheduleEntry] = []
    diagnostics: Diagnostics = Diagnostics()
    class_timetables: List[ClassTimetable] = []
    teacher_rosters: List[TeacherRoster] = []
    summary: Optional[ScheduleSummary] = None
    messages: Messages = Messages()

    status: Optional[str] = None  # "COMPLETE", "PARTIAL", "TIMEOUT", "INVALID", "ERROR"
    solve_time_seconds: Optional[float] = None


class SlotTableResponse(BaseModel):
    """Preview of the period slots a calendar yields"""
    days: List[str]
    periods_per_day: int
    slots: List[PeriodSlot]
    breaks: List[BreakWindow] = []


class PresetResponse(BaseModel):
    name: str
    calendar: CalendarConfig
