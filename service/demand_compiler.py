"""
Demand compiler.

Flattens the per-class subject workload into atomic requirement units and
orders them most-constrained first.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import logging

from models.schemas import (
    ClassSection, TeacherProfile, SubjectDemand, DataQualityWarning, WarningCode
)
from service.errors import InvalidWorkloadError, UnknownTeacherError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requirement:
    """One unit to place: a single period or a double period."""

    class_id: str
    subject: str
    size: int                     # 1 or 2 contiguous periods
    teacher_ids: Tuple[str, ...]  # candidates in preference order
    demand_index: int             # position of the demand within its class
    unit_index: int               # position of the unit within its demand

    @property
    def is_double(self) -> bool:
        return self.size == 2

    @property
    def pinned(self) -> bool:
        return len(self.teacher_ids) == 1


@dataclass(frozen=True)
class CompiledDemand:
    requirements: Tuple[Requirement, ...]
    warnings: Tuple[DataQualityWarning, ...] = ()
    periods_requested: Dict[Tuple[str, str], int] = field(default_factory=dict)

    @property
    def total_periods(self) -> int:
        return sum(r.size for r in self.requirements)


def compile_requirements(classes: List[ClassSection], teachers: List[TeacherProfile]) -> CompiledDemand:
    """
    Expand class workloads into requirement units.

    Args:
        classes: Class sections with their subject demands
        teachers: Teacher roster

    Returns:
        CompiledDemand with requirements grouped by class and sorted
        doubles-first, then by subject name

    Raises:
        UnknownTeacherError: If a demand is pinned to a teacher not on the roster
        InvalidWorkloadError: If ids, loads or period counts are malformed
    """
    roster = _validate_teachers(teachers)
    _validate_classes(classes)

    requirements: List[Requirement] = []
    warnings: List[DataQualityWarning] = []
    periods_requested: Dict[Tuple[str, str], int] = {}

    for section in classes:
        units: List[Requirement] = []
        for demand_index, demand in enumerate(section.subjects):
            _validate_demand(section, demand)
            candidates = _candidate_teachers(section, demand, teachers, roster)

            key = (section.class_id, demand.subject)
            periods_requested[key] = periods_requested.get(key, 0) + demand.periods_per_week

            if demand.periods_per_week == 0:
                warnings.append(DataQualityWarning(
                    class_id=section.class_id,
                    subject=demand.subject,
                    code=WarningCode.ZERO_PERIODS,
                    message=f"{demand.subject} in {section.name} has zero periods per week"
                ))
                continue

            sizes = _unit_sizes(demand)
            if demand.is_double and demand.periods_per_week % 2:
                warnings.append(DataQualityWarning(
                    class_id=section.class_id,
                    subject=demand.subject,
                    code=WarningCode.ODD_DOUBLE_PERIOD_COUNT,
                    message=(
                        f"{demand.subject} in {section.name} is a double-period subject with "
                        f"{demand.periods_per_week} periods; the last period is scheduled as a single"
                    )
                ))

            for unit_index, size in enumerate(sizes):
                units.append(Requirement(
                    class_id=section.class_id,
                    subject=demand.subject,
                    size=size,
                    teacher_ids=candidates,
                    demand_index=demand_index,
                    unit_index=unit_index
                ))

        units.sort(key=lambda r: (-r.size, r.subject, r.demand_index, r.unit_index))
        requirements.extend(units)

    for warning in warnings:
        logger.warning(f"Data quality: {warning.message}")

    logger.info(
        f"Compiled {len(requirements)} requirement units for {len(classes)} classes "
        f"({len(warnings)} warnings)"
    )
    return CompiledDemand(
        requirements=tuple(requirements),
        warnings=tuple(warnings),
        periods_requested=periods_requested
    )


def _unit_sizes(demand: SubjectDemand) -> List[int]:
    if not demand.is_double:
        return [1] * demand.periods_per_week
    doubles, remainder = divmod(demand.periods_per_week, 2)
    return [2] * doubles + [1] * remainder


def _validate_teachers(teachers: List[TeacherProfile]) -> Dict[str, TeacherProfile]:
    roster = {}
    for teacher in teachers:
        if teacher.teacher_id in roster:
            raise InvalidWorkloadError(f"Teacher id {teacher.teacher_id} is used more than once")
        if teacher.max_weekly_load <= 0:
            raise InvalidWorkloadError(
                f"Teacher {teacher.name} must have a weekly load greater than 0"
            )
        if teacher.max_daily_load is not None and teacher.max_daily_load <= 0:
            raise InvalidWorkloadError(
                f"Teacher {teacher.name} must have a daily load greater than 0"
            )
        roster[teacher.teacher_id] = teacher
    return roster


def _validate_classes(classes: List[ClassSection]):
    seen = set()
    for section in classes:
        if section.class_id in seen:
            raise InvalidWorkloadError(f"Class id {section.class_id} is used more than once")
        seen.add(section.class_id)


def _validate_demand(section: ClassSection, demand: SubjectDemand):
    if not demand.subject or not demand.subject.strip():
        raise InvalidWorkloadError(f"Class {section.name} has a subject without a name")
    if demand.periods_per_week < 0:
        raise InvalidWorkloadError(
            f"{demand.subject} in {section.name}: periods per week must not be negative"
        )


def _candidate_teachers(section: ClassSection, demand: SubjectDemand,
                        teachers: List[TeacherProfile],
                        roster: Dict[str, TeacherProfile]) -> Tuple[str, ...]:
    if demand.teacher_id:
        if demand.teacher_id not in roster:
            raise UnknownTeacherError(demand.teacher_id, section.class_id, demand.subject)
        return (demand.teacher_id,)

    if not teachers:
        raise InvalidWorkloadError(
            f"{demand.subject} in {section.name} has no teacher and the roster is empty"
        )

    # Unpinned: teachers who list the subject, otherwise anyone
    qualified = tuple(t.teacher_id for t in teachers if demand.subject in t.subjects)
    if qualified:
        return qualified
    logger.warning(
        f"No teacher lists {demand.subject}; any teacher may take it in {section.name}"
    )
    return tuple(t.teacher_id for t in teachers)
