"""
Greedy shift assignment.

Strategy:
1. Walk shifts strictly in input order
2. Keep a caller-supplied pairing if it still satisfies every rule
3. Otherwise filter candidates by role, availability, weekly cap, conflicts
4. Pick the best survivor by preference, hours, assignment count, name

Earlier shifts can use up capacity a later shift needed; there is no
backtracking.
"""

import logging
from collections import defaultdict
from typing import Optional

from .availability import Coverage, coverage_for_shift, is_eligible, within_cap
from .time_math import overlaps
from .types import (
    Assignment,
    Employee,
    EmployeeTotals,
    Issue,
    IssueType,
    ScheduleContext,
    ScheduleResult,
    Shift,
    TimeBlock,
)


logger = logging.getLogger(__name__)

MISSING_TIME_REASON = "Shift is missing start or end time."
RELEASED_REASON = "Existing assignment violates scheduling rules and was released."
NO_AVAILABILITY_REASON = "No employees are available during the shift window."
WEEKLY_CAP_REASON = "All available employees would exceed their weekly cap."
CONFLICT_REASON = "All available employees have conflicting assignments."


def no_role_reason(shift: Shift) -> str:
    return f"No employees available for role {shift.role_needed.label}."


class ScheduleSolver:
    """
    Single-pass greedy scheduler. Running totals only grow as shifts are
    committed and are local to one solver instance.
    """

    def __init__(self, context: ScheduleContext):
        self.context = context
        self.assignments: list[Assignment] = []
        self.issues: list[Issue] = []
        self.employee_hours: dict[str, float] = defaultdict(float)
        self.employee_blocks: dict[str, list[TimeBlock]] = defaultdict(list)

    def solve(self) -> ScheduleResult:
        for shift in self.context.shifts:
            self._assign_shift(shift)

        logger.debug(
            f"Scheduled {len(self.context.shifts)} shifts: "
            f"{sum(1 for a in self.assignments if a.employee_id)} filled, "
            f"{len(self.issues)} issues"
        )
        return ScheduleResult(
            assignments=self.assignments,
            issues=self.issues,
            totals_by_employee=self._summarize_totals(),
        )

    def _assign_shift(self, shift: Shift):
        if not shift.has_times:
            self._leave_unfilled(shift, MISSING_TIME_REASON, IssueType.MISSING_TIME)
            return

        existing_id = self.context.existing_assignments.get(shift.id)
        if existing_id:
            if self._can_keep_existing(existing_id, shift):
                self._commit(existing_id, shift)
                return
            logger.debug(f"Released existing assignment {shift.id} -> {existing_id}")
            self.issues.append(Issue(
                shift_id=shift.id,
                employee_id=existing_id,
                reason=RELEASED_REASON,
                type=IssueType.EXISTING_RELEASED.value,
            ))

        candidates = [e for e in self.context.employees.values() if is_eligible(e, shift)]
        if not candidates:
            self._leave_unfilled(shift, no_role_reason(shift), IssueType.ROLE_UNAVAILABLE)
            return

        covered = [
            (emp, coverage)
            for emp, coverage in ((e, self._coverage(e, shift)) for e in candidates)
            if coverage.available
        ]
        if not covered:
            self._leave_unfilled(shift, NO_AVAILABILITY_REASON, IssueType.AVAILABILITY)
            return

        under_cap = [
            (emp, coverage) for emp, coverage in covered
            if within_cap(emp, self.employee_hours[emp.id], shift)
        ]
        if not under_cap:
            self._leave_unfilled(shift, WEEKLY_CAP_REASON, IssueType.WEEKLY_CAP)
            return

        free = [
            (emp, coverage) for emp, coverage in under_cap
            if not self._has_conflict(emp.id, shift)
        ]
        if not free:
            self._leave_unfilled(shift, CONFLICT_REASON, IssueType.OVERLAP)
            return

        chosen = self._pick_best(free)
        self._commit(chosen.id, shift)

    def _can_keep_existing(self, employee_id: str, shift: Shift) -> bool:
        employee: Optional[Employee] = self.context.employees.get(employee_id)
        if employee is None or not is_eligible(employee, shift):
            return False
        return (
            self._coverage(employee, shift).available
            and within_cap(employee, self.employee_hours[employee_id], shift)
            and not self._has_conflict(employee_id, shift)
        )

    def _coverage(self, employee: Employee, shift: Shift) -> Coverage:
        return coverage_for_shift(self.context.availability.get(employee.id, []), shift)

    def _has_conflict(self, employee_id: str, shift: Shift) -> bool:
        return overlaps(self.employee_blocks.get(employee_id, []), shift.start, shift.end)

    def _pick_best(self, options: list[tuple[Employee, Coverage]]) -> Employee:
        """Preferred window first, then fewest hours, fewest assignments, name."""

        def sort_key(option: tuple[Employee, Coverage]) -> tuple:
            emp, coverage = option
            return (
                not coverage.preferred,
                self.employee_hours[emp.id],
                len(self.employee_blocks[emp.id]),
                emp.name or "",
            )

        # sorted() is stable, so exact ties keep employee input order
        return sorted(options, key=sort_key)[0][0]

    def _commit(self, employee_id: str, shift: Shift):
        self.assignments.append(Assignment(shift_id=shift.id, employee_id=employee_id))
        self.employee_hours[employee_id] += shift.hours
        self.employee_blocks[employee_id].append(
            TimeBlock(shift_id=shift.id, start=shift.start, end=shift.end)
        )

    def _leave_unfilled(self, shift: Shift, reason: str, issue_type: IssueType):
        self.assignments.append(Assignment(shift_id=shift.id, employee_id=None, reason=reason))
        self.issues.append(Issue(shift_id=shift.id, reason=reason, type=issue_type.value))

    def _summarize_totals(self) -> dict[str, EmployeeTotals]:
        return {
            emp_id: EmployeeTotals(
                employee_id=emp_id,
                name=employee.name,
                role=employee.role,
                weekly_cap=employee.weekly_cap,
                hours=round(self.employee_hours.get(emp_id, 0.0), 2),
                assignments=len(self.employee_blocks.get(emp_id, [])),
            )
            for emp_id, employee in self.context.employees.items()
        }


def solve_schedule(context: ScheduleContext) -> ScheduleResult:
    """
    Main entry point for the greedy pass.

    Args:
        context: ScheduleContext with canonical entities

    Returns:
        ScheduleResult with one assignment per shift, in shift order
    """
    solver = ScheduleSolver(context)
    return solver.solve()
