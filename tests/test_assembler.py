"""
Tests for the schedule assembler and the grid / roster views.
"""
from models.schemas import (
    BreakWindow, CalendarConfig, ClassSection, SubjectDemand, TeacherProfile, UnscheduledReason
)
from service.allocator import Allocator
from service.assembler import assemble, class_grid, teacher_roster
from service.calendar_builder import build_slots
from service.demand_compiler import compile_requirements
from service.ledger import AvailabilityLedger


def get_inputs():
    calendar = CalendarConfig(
        working_days=["MON", "TUE"],
        start_time="08:00",
        end_time="12:00",
        period_duration=60,
        breaks=[BreakWindow(name="Recess", start_time="10:00", end_time="10:30")]
    )
    teachers = [
        TeacherProfile(teacher_id="t1", name="Alice Smith", max_weekly_load=3),
        TeacherProfile(teacher_id="t2", name="Bob Johnson", max_weekly_load=10),
    ]
    classes = [
        ClassSection(class_id="c1", name="Grade 1", subjects=[
            SubjectDemand(subject="Math", periods_per_week=4, teacher_id="t1"),
            SubjectDemand(subject="Art", periods_per_week=1, teacher_id="t2"),
        ]),
        ClassSection(class_id="c2", name="Grade 2", subjects=[
            SubjectDemand(subject="Art", periods_per_week=2, teacher_id="t2"),
        ]),
        ClassSection(class_id="c3", name="Grade 3", subjects=[]),
    ]
    return calendar, teachers, classes


def solve(calendar, teachers, classes):
    table = build_slots(calendar)
    compiled = compile_requirements(classes, teachers)
    result = Allocator(table, AvailabilityLedger(teachers)).allocate(compiled.requirements)
    return table, compiled, result


def test_groups_entries_by_class_and_teacher_in_day_order():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)

    report = assemble(result, table, classes, compiled.warnings)

    assert set(report.schedule_by_class) == {"c1", "c2", "c3"}
    assert report.schedule_by_class["c3"] == []
    for entries in list(report.schedule_by_class.values()) + list(report.schedule_by_teacher.values()):
        keys = [(table.days.index(e.day), e.period_index) for e in entries]
        assert keys == sorted(keys)
    assert all(e.teacher_id == "t2" for e in report.schedule_by_teacher["t2"])
    assert len(report.entries) == len(result.entries)


def test_summary_counts():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)

    summary = assemble(result, table, classes).summary

    # t1 can only take 3 of the 4 Math periods
    assert summary.total_requirements == 7
    assert summary.total_placed == 6
    assert summary.total_unplaced == 1
    assert summary.total_periods_requested == 7
    assert summary.total_periods_placed == 6
    per_class = {c.class_id: c for c in summary.classes}
    assert per_class["c1"].periods_placed == 4
    assert per_class["c1"].fulfillment_percent == 80.0
    assert per_class["c2"].fulfillment_percent == 100.0
    assert per_class["c3"].fulfillment_percent == 100.0


def test_diagnostics_carry_unscheduled_and_warnings():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)

    report = assemble(result, table, classes, compiled.warnings)

    assert [(u.class_id, u.subject, u.reason) for u in report.diagnostics.unscheduled] == [
        ("c1", "Math", UnscheduledReason.TEACHER_LOAD_EXCEEDED)
    ]
    assert report.diagnostics.warnings == []


def test_assemble_is_repeatable():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)

    first = assemble(result, table, classes, compiled.warnings)
    second = assemble(result, table, classes, compiled.warnings)

    assert first == second
    teacher_map = {t.teacher_id: t for t in teachers}
    assert class_grid(classes[0], first, table, teacher_map) == class_grid(classes[0], second, table, teacher_map)


def test_class_grid_has_every_period_and_break():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)
    report = assemble(result, table, classes)

    grid = class_grid(classes[0], report, table, {t.teacher_id: t for t in teachers})

    assert grid.class_name == "Grade 1"
    assert [d.day for d in grid.timetable] == ["MON", "TUE"]
    monday = grid.timetable[0].slots
    assert [s.start_time for s in monday] == ["08:00", "09:00", "10:00", "10:30"]
    recess = monday[2]
    assert recess.break_ and recess.break_name == "Recess" and recess.period_index is None
    taught = [s for d in grid.timetable for s in d.slots if s.subject]
    assert len(taught) == 4
    assert {s.teacher_name for s in taught if s.subject == "Math"} == {"Alice Smith"}


def test_teacher_roster_shows_classes():
    calendar, teachers, classes = get_inputs()
    table, compiled, result = solve(calendar, teachers, classes)
    report = assemble(result, table, classes)

    roster = teacher_roster(teachers[1], report, table, {c.class_id: c.name for c in classes})

    assert roster.assigned_periods == 3
    assert roster.max_weekly_load == 10
    taught = [s for d in roster.timetable for s in d.slots if s.class_id]
    assert sorted(s.class_name for s in taught) == ["Grade 1", "Grade 2", "Grade 2"]
