from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse
from models.schemas import (
    CalendarConfig, SchedulingRequest, SchedulingResponse, SlotTableResponse, PresetResponse
)
from service.calendar_builder import build_slots
from service.errors import InvalidCalendarError
from service.presets import get_preset, preset_names
from service.timetable_scheduler import TimetableScheduler
from config.settings import settings

# Create a router instance
router = APIRouter()


def _scheduler_for(request: SchedulingRequest) -> TimetableScheduler:
    options = request.options
    time_limit = (
        options.time_limit_seconds
        if options.time_limit_seconds is not None else settings.solver_timeout_seconds
    )
    return TimetableScheduler(
        # 0 disables the wall-clock limit
        time_limit_seconds=time_limit or None,
        max_requirements=(
            options.max_requirements
            if options.max_requirements is not None else settings.solver_max_requirements
        ),
        backtracking=(
            options.backtracking
            if options.backtracking is not None else settings.solver_backtracking_enabled
        ),
        max_relocations=(
            options.max_relocations
            if options.max_relocations is not None else settings.solver_max_relocations
        )
    )


@router.post("/timetable/generate", response_model=SchedulingResponse)
def generate_timetable(request: SchedulingRequest):
    """
    Generate a weekly timetable.

    Always returns the best-effort schedule together with the requirements
    that could not be placed and why.
    """
    scheduler = _scheduler_for(request)
    return scheduler.solve_scheduling(request)


@router.post("/timetable/slots", response_model=SlotTableResponse)
def preview_slots(calendar: CalendarConfig):
    """Show the period slots a calendar yields."""
    try:
        table = build_slots(calendar)
    except InvalidCalendarError as e:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"errors": {"Calendar": [str(e)]}}
        )
    return SlotTableResponse(
        days=list(table.days),
        periods_per_day=table.max_period_index,
        slots=table.all_slots(),
        breaks=list(table.breaks)
    )


@router.get("/timetable/presets")
def list_presets():
    """List the built-in institute calendars."""
    return {"presets": preset_names()}


@router.get("/timetable/presets/{name}", response_model=PresetResponse)
def read_preset(name: str):
    try:
        calendar = get_preset(name)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown preset '{name}'")
    return PresetResponse(name=name.upper(), calendar=calendar)
