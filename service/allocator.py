"""
Greedy allocator.

Places requirement units one by one in compiler order. Each unit goes to the
feasible slot (or contiguous pair) that keeps the class's periods of that
subject spread over the week. Units that cannot be placed are reported, never
raised. An optional bounded backtracking step can move one earlier single
period out of the way before giving up on a unit.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple
import logging
import time

from models.schemas import (
    PeriodSlot, ScheduleEntry, UnscheduledReason, UnscheduledRequirement
)
from service.calendar_builder import SlotTable
from service.demand_compiler import Requirement
from service.ledger import AvailabilityLedger

logger = logging.getLogger(__name__)

Unit = Tuple[PeriodSlot, ...]


@dataclass(frozen=True)
class SolveBudget:
    """Caller-imposed limits; ``None`` means unlimited."""

    max_seconds: Optional[float] = None
    max_requirements: Optional[int] = None


@dataclass(frozen=True)
class Placement:
    requirement: Requirement
    teacher_id: str
    slots: Unit

    def entries(self) -> List[ScheduleEntry]:
        return [
            ScheduleEntry(
                class_id=self.requirement.class_id,
                day=slot.day,
                period_index=slot.period_index,
                subject=self.requirement.subject,
                teacher_id=self.teacher_id
            )
            for slot in self.slots
        ]


@dataclass(frozen=True)
class AllocationResult:
    entries: Tuple[ScheduleEntry, ...]
    unscheduled: Tuple[UnscheduledRequirement, ...]
    placements: Tuple[Placement, ...]
    requirements: Tuple[Requirement, ...]
    timed_out: bool = False
    relocations: int = 0

    @property
    def periods_placed(self) -> int:
        return len(self.entries)


class Allocator:
    """
    Deterministic greedy allocator over one ledger.

    Args:
        slot_table: Period slots produced by the calendar builder
        ledger: Fresh ledger owned by this solve
        budget: Optional time / requirement-count limits
        backtracking: Try relocating one earlier single period on failure
        max_relocations: Upper bound on relocations per run
        clock: Monotonic clock, injectable for tests
    """

    def __init__(self, slot_table: SlotTable, ledger: AvailabilityLedger,
                 budget: Optional[SolveBudget] = None, backtracking: bool = False,
                 max_relocations: int = 50, clock: Callable[[], float] = time.monotonic):
        self.slot_table = slot_table
        self.ledger = ledger
        self.budget = budget or SolveBudget()
        self.backtracking = backtracking
        self.max_relocations = max_relocations
        self.clock = clock

        self._units: Dict[int, List[Unit]] = {}
        self._day_position = {day: idx for idx, day in enumerate(slot_table.days)}
        self._placements: List[Placement] = []
        self._by_class_slot: Dict[Tuple[str, str, int], Placement] = {}
        self._subject_day_counts: Dict[Tuple[str, str], Dict[str, int]] = {}
        self._relocations = 0

    def allocate(self, requirements: Iterable[Requirement]) -> AllocationResult:
        """
        Place every requirement that fits.

        Returns:
            AllocationResult with entries, diagnostics for unplaced units and
            whether the budget cut the run short
        """
        requirements = tuple(requirements)
        unscheduled: List[UnscheduledRequirement] = []
        started = self.clock()
        timed_out = False

        for position, requirement in enumerate(requirements):
            if self._budget_exhausted(position, started):
                timed_out = True
                remaining = requirements[position:]
                logger.warning(
                    f"Solve budget exhausted after {position} requirements; "
                    f"{len(remaining)} not attempted"
                )
                unscheduled.extend(
                    self._unscheduled(r, UnscheduledReason.NOT_ATTEMPTED) for r in remaining
                )
                break

            choice = self._select(requirement)
            if choice is not None:
                self._place(Placement(requirement, choice[0], choice[1]))
                continue

            if self.backtracking and self._relocate_and_place(requirement):
                continue

            reason = self._failure_reason(requirement)
            logger.debug(f"Could not place {requirement.subject} for {requirement.class_id}: {reason.value}")
            unscheduled.append(self._unscheduled(requirement, reason))

        result = AllocationResult(
            entries=tuple(self.ledger.entries),
            unscheduled=tuple(unscheduled),
            placements=tuple(self._placements),
            requirements=requirements,
            timed_out=timed_out,
            relocations=self._relocations
        )
        logger.info(
            f"Allocated {len(result.placements)}/{len(requirements)} requirement units "
            f"({result.periods_placed} periods, {self._relocations} relocations)"
        )
        return result

    # ===========================
    # Candidate search
    # ===========================

    def _candidate_units(self, size: int) -> List[Unit]:
        if size not in self._units:
            if size == 1:
                units = [(slot,) for slot in self.slot_table.all_slots()]
            else:
                units = [
                    pair
                    for day in self.slot_table.days
                    for pair in self.slot_table.adjacent_pairs(day)
                ]
            self._units[size] = units
        return self._units[size]

    def _rank(self, requirement: Requirement, teacher_pos: int, unit: Unit) -> Tuple[int, int, int, int]:
        """Fewest periods of this subject that day, then earliest day, period, teacher."""
        day = unit[0].day
        on_day = self._subject_day_counts.get(
            (requirement.class_id, requirement.subject), {}
        ).get(day, 0)
        return (on_day, self._day_position[day], unit[0].period_index, teacher_pos)

    def _is_feasible(self, requirement: Requirement, teacher_id: str, unit: Unit) -> bool:
        if not self._is_open(requirement, teacher_id, unit):
            return False
        return self.ledger.can_teach(teacher_id, unit[0].day, requirement.size)

    def _select(self, requirement: Requirement, exclude=frozenset()) -> Optional[Tuple[str, Unit]]:
        best = None
        best_key = None
        for teacher_pos, teacher_id in enumerate(requirement.teacher_ids):
            for unit in self._candidate_units(requirement.size):
                if any((s.day, s.period_index) in exclude for s in unit):
                    continue
                if not self._is_feasible(requirement, teacher_id, unit):
                    continue
                key = self._rank(requirement, teacher_pos, unit)
                if best_key is None or key < best_key:
                    best, best_key = (teacher_id, unit), key
        return best

    def _failure_reason(self, requirement: Requirement) -> UnscheduledReason:
        loaded = [
            t for t in requirement.teacher_ids
            if self.ledger.remaining_load(t) >= requirement.size
        ]
        if not loaded:
            return UnscheduledReason.TEACHER_LOAD_EXCEEDED

        if requirement.is_double:
            # A free pair rejected only by the daily cap is not a pairing problem
            if any(self._is_open(requirement, t, unit)
                   for t in loaded for unit in self._candidate_units(2)):
                return UnscheduledReason.NO_SLOT_AVAILABLE
            if any(self._is_open(requirement, t, (slot,))
                   for t in loaded for slot in self.slot_table.all_slots()):
                return UnscheduledReason.NO_CONTIGUOUS_PAIR

        return UnscheduledReason.NO_SLOT_AVAILABLE

    def _is_open(self, requirement: Requirement, teacher_id: str, unit: Unit) -> bool:
        return all(
            self.ledger.is_class_free(requirement.class_id, s.day, s.period_index)
            and self.ledger.is_teacher_free(teacher_id, s.day, s.period_index)
            for s in unit
        )

    # ===========================
    # Ledger bookkeeping
    # ===========================

    def _place(self, placement: Placement):
        for entry in placement.entries():
            self.ledger.place(entry)
        requirement = placement.requirement
        for slot in placement.slots:
            self._by_class_slot[(requirement.class_id, slot.day, slot.period_index)] = placement
        counts = self._subject_day_counts.setdefault((requirement.class_id, requirement.subject), {})
        day = placement.slots[0].day
        counts[day] = counts.get(day, 0) + requirement.size
        self._placements.append(placement)
        logger.debug(
            f"Placed {requirement.subject} for {requirement.class_id} with {placement.teacher_id} "
            f"on {day} #{placement.slots[0].period_index}"
        )

    def _unplace(self, placement: Placement):
        for entry in placement.entries():
            self.ledger.unplace(entry)
        requirement = placement.requirement
        for slot in placement.slots:
            del self._by_class_slot[(requirement.class_id, slot.day, slot.period_index)]
        counts = self._subject_day_counts[(requirement.class_id, requirement.subject)]
        counts[placement.slots[0].day] -= requirement.size
        self._placements.remove(placement)

    # ===========================
    # Bounded backtracking
    # ===========================

    def _relocate_and_place(self, requirement: Requirement) -> bool:
        """
        Free a slot for ``requirement`` by moving one earlier single period.

        Only candidates whose teacher side is already free and whose class
        side is blocked by exactly one single-period placement are tried.
        """
        if self._relocations >= self.max_relocations:
            return False

        candidates = []
        for teacher_pos, teacher_id in enumerate(requirement.teacher_ids):
            for unit in self._candidate_units(requirement.size):
                blocker = self._single_blocker(requirement, teacher_id, unit)
                if blocker is not None:
                    candidates.append((self._rank(requirement, teacher_pos, unit), teacher_id, unit, blocker))
        candidates.sort(key=lambda c: c[0])

        for _, teacher_id, unit, blocker in candidates:
            contested = frozenset((s.day, s.period_index) for s in unit)
            self._unplace(blocker)
            moved_to = self._select(blocker.requirement, exclude=contested)
            if moved_to is not None:
                moved = Placement(blocker.requirement, moved_to[0], moved_to[1])
                self._place(moved)
                if self._is_feasible(requirement, teacher_id, unit):
                    self._place(Placement(requirement, teacher_id, unit))
                    self._relocations += 1
                    logger.debug(
                        f"Moved {blocker.requirement.subject} for {blocker.requirement.class_id} "
                        f"to {moved_to[1][0].day} #{moved_to[1][0].period_index} to fit {requirement.subject}"
                    )
                    return True
                self._unplace(moved)
            self._place(blocker)
        return False

    def _single_blocker(self, requirement: Requirement, teacher_id: str, unit: Unit) -> Optional[Placement]:
        for slot in unit:
            if not self.ledger.is_teacher_free(teacher_id, slot.day, slot.period_index):
                return None
        if not self.ledger.can_teach(teacher_id, unit[0].day, requirement.size):
            return None

        blockers = {
            self._by_class_slot[(requirement.class_id, slot.day, slot.period_index)]
            for slot in unit
            if (requirement.class_id, slot.day, slot.period_index) in self._by_class_slot
        }
        if len(blockers) != 1:
            return None
        blocker = blockers.pop()
        if blocker.requirement.size != 1:
            return None
        return blocker

    # ===========================
    # Helper Methods
    # ===========================

    def _budget_exhausted(self, attempted: int, started: float) -> bool:
        if self.budget.max_requirements is not None and attempted >= self.budget.max_requirements:
            return True
        if self.budget.max_seconds is not None and self.clock() - started >= self.budget.max_seconds:
            return True
        return False

    @staticmethod
    def _unscheduled(requirement: Requirement, reason: UnscheduledReason) -> UnscheduledRequirement:
        return UnscheduledRequirement(
            class_id=requirement.class_id,
            subject=requirement.subject,
            units_requested=requirement.size,
            units_placed=0,
            reason=reason
        )
