"""
Timetable generation service.

Runs one solve request end to end: calendar, demand, allocation, assembly.
Each call builds its own ledger, so separate requests can be solved on
separate threads.
"""

from typing import List, Optional
from datetime import datetime
import logging

from models.schemas import (
    CalendarConfig, TeacherProfile, ClassSection, SchedulingRequest,
    SchedulingResponse, Messages, ErrorMessage
)
from service.allocator import Allocator, SolveBudget
from service.assembler import ScheduleReport, assemble, class_grid, teacher_roster
from service.calendar_builder import SlotTable, build_slots
from service.demand_compiler import compile_requirements
from service.errors import TimetableError
from service.ledger import AvailabilityLedger

logger = logging.getLogger(__name__)


class TimetableScheduler:
    """
    Greedy timetable generator.

    Supports an optional wall-clock / requirement budget and bounded
    backtracking.
    """

    def __init__(self, time_limit_seconds: Optional[float] = 30,
                 max_requirements: Optional[int] = None,
                 backtracking: bool = False, max_relocations: int = 50):
        """
        Initialize the scheduler.

        Args:
            time_limit_seconds: Wall-clock budget for allocation, None for unlimited
            max_requirements: Number of requirement units to attempt, None for all
            backtracking: If True, relocate one earlier period when a unit does not fit
            max_relocations: Maximum relocations per solve
        """
        self.budget = SolveBudget(max_seconds=time_limit_seconds, max_requirements=max_requirements)
        self.backtracking = backtracking
        self.max_relocations = max_relocations
        self.slot_table: Optional[SlotTable] = None

    def generate(self, calendar: CalendarConfig, teachers: List[TeacherProfile],
                 classes: List[ClassSection]) -> ScheduleReport:
        """
        Build a timetable.

        Raises:
            TimetableError: On invalid calendar geometry or workload, before
                anything is allocated
        """
        self.slot_table = build_slots(calendar)
        compiled = compile_requirements(classes, teachers)

        ledger = AvailabilityLedger(teachers)
        allocator = Allocator(
            self.slot_table,
            ledger,
            budget=self.budget,
            backtracking=self.backtracking,
            max_relocations=self.max_relocations
        )
        result = allocator.allocate(compiled.requirements)
        return assemble(result, self.slot_table, classes, compiled.warnings)

    def solve_scheduling(self, request: SchedulingRequest) -> SchedulingResponse:
        """
        Main entry point for the HTTP layer.

        Args:
            request: Calendar, roster and workload

        Returns:
            SchedulingResponse with entries, diagnostics and grid views, or
            error messages when the input is structurally invalid
        """
        try:
            start_time = datetime.now()
            report = self.generate(request.calendar, request.teachers, request.classes)
            solve_time = (datetime.now() - start_time).total_seconds()
        except TimetableError as e:
            logger.warning(f"Rejected timetable request: {e}")
            return self._create_invalid_response(e)
        except Exception as e:
            logger.error(f"Scheduling error: {str(e)}", exc_info=True)
            return self._create_error_response(str(e))

        return self._build_response(request, report, solve_time)

    def _build_response(self, request: SchedulingRequest, report: ScheduleReport,
                        solve_time: float) -> SchedulingResponse:
        teachers = {t.teacher_id: t for t in request.teachers}
        class_names = {c.class_id: c.name for c in request.classes}

        if report.timed_out:
            status = "TIMEOUT"
        elif report.diagnostics.unscheduled:
            status = "PARTIAL"
        else:
            status = "COMPLETE"

        messages = [
            ErrorMessage(
                title=f"Unscheduled {item.subject}",
                message=f"{class_names.get(item.class_id, item.class_id)}: "
                        f"{item.units_requested} period(s) not placed ({item.reason.value})"
            )
            for item in report.diagnostics.unscheduled
        ]
        messages.extend(
            ErrorMessage(title="Data Quality Warning", message=warning.message)
            for warning in report.diagnostics.warnings
        )

        logger.info(
            f"Timetable {status}: {report.summary.total_periods_placed}/"
            f"{report.summary.total_periods_requested} periods in {solve_time:.3f}s"
        )

        return SchedulingResponse(
            entries=list(report.entries),
            diagnostics=report.diagnostics,
            class_timetables=[
                class_grid(section, report, self.slot_table, teachers)
                for section in request.classes
            ],
            teacher_rosters=[
                teacher_roster(teacher, report, self.slot_table, class_names)
                for teacher in request.teachers
            ],
            summary=report.summary,
            messages=Messages(error_message=messages),
            status=status,
            solve_time_seconds=solve_time
        )

    def _create_invalid_response(self, error: TimetableError) -> SchedulingResponse:
        """Create response for structurally invalid input."""
        return SchedulingResponse(
            messages=Messages(error_message=[
                ErrorMessage(title=error.title, message=str(error))
            ]),
            status="INVALID",
            solve_time_seconds=0.0
        )

    def _create_error_response(self, error: str) -> SchedulingResponse:
        """Create response for an unexpected solver failure."""
        return SchedulingResponse(
            messages=Messages(error_message=[
                ErrorMessage(
                    title="Solver Error",
                    message=f"{error}. Please check your input data and try again."
                )
            ]),
            status="ERROR",
            solve_time_seconds=0.0
        )
