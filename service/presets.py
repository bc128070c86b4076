"""
Ready-made calendars for common institute types.
"""

from typing import Dict, List

from models.schemas import BreakWindow, CalendarConfig

PRESETS: Dict[str, CalendarConfig] = {
    "SCHOOL": CalendarConfig(
        working_days=["MON", "TUE", "WED", "THU", "FRI"],
        start_time="09:30",
        end_time="15:30",
        period_duration=45,
        breaks=[BreakWindow(name="Lunch", start_time="12:45", end_time="13:30")]
    ),
    "MADRASSA": CalendarConfig(
        working_days=["SAT", "SUN", "MON", "TUE", "WED", "THU"],
        start_time="06:30",
        end_time="08:30",
        period_duration=40,
        breaks=[]
    ),
    "TUITION": CalendarConfig(
        working_days=["SAT", "SUN"],
        start_time="09:00",
        end_time="13:00",
        period_duration=60,
        breaks=[BreakWindow(name="Break", start_time="11:00", end_time="11:15")]
    ),
}


def preset_names() -> List[str]:
    return list(PRESETS)


def get_preset(name: str) -> CalendarConfig:
    """Look up a preset by name (case-insensitive). Raises KeyError if unknown."""
    return PRESETS[name.upper()]
