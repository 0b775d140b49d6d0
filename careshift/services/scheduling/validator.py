"""
Independent re-check of an assignment set.
Rebuilds canonical entities from the raw records and reports every rule the
assignments break. Inputs are never mutated.
"""

from collections import defaultdict
from collections.abc import Mapping
from typing import Optional

from .availability import coverage_for_shift
from .normalizer import (
    ASSIGNMENT_EMPLOYEE_KEYS,
    ASSIGNMENT_SHIFT_KEYS,
    lookup,
    normalize_availability,
    normalize_employees,
    normalize_shifts,
)
from .time_math import overlaps
from .types import (
    Assignment,
    AvailabilityWindow,
    Employee,
    RequirementKind,
    ScheduleInputError,
    Shift,
    TimeBlock,
    ValidationError,
    ValidationErrorType,
)


def _format_cap(cap: float) -> str:
    return str(int(cap)) if cap.is_integer() else repr(cap)


def _assignment_pair(item) -> tuple[Optional[str], Optional[str]]:
    if isinstance(item, Assignment):
        return item.shift_id, item.employee_id
    if isinstance(item, Mapping):
        return (
            lookup(item, ASSIGNMENT_SHIFT_KEYS) or None,
            lookup(item, ASSIGNMENT_EMPLOYEE_KEYS) or None,
        )
    raise ScheduleInputError(f"assignment must be a mapping, got {type(item).__name__}")


class AssignmentValidator:
    def __init__(
        self,
        shifts: dict[str, Shift],
        employees: dict[str, Employee],
        availability: dict[str, list[AvailabilityWindow]],
    ):
        self.shifts = shifts
        self.employees = employees
        self.availability = availability
        self.errors: list[ValidationError] = []
        self.hours_by_employee: dict[str, float] = defaultdict(float)
        self.blocks_by_employee: dict[str, list[TimeBlock]] = defaultdict(list)

    def validate(self, assignments) -> list[ValidationError]:
        if not isinstance(assignments, (list, tuple)):
            raise ScheduleInputError(
                f"assignments must be a list, got {type(assignments).__name__}"
            )

        for item in assignments:
            shift_id, employee_id = _assignment_pair(item)
            if not shift_id or not employee_id:
                continue
            self._check_assignment(str(shift_id), str(employee_id))

        self._check_weekly_caps()
        self._check_overlaps()
        return self.errors

    def _error(self, error_type: ValidationErrorType, message: str, shift_id=None, employee_id=None):
        self.errors.append(ValidationError(
            type=error_type, message=message, shift_id=shift_id, employee_id=employee_id,
        ))

    def _check_assignment(self, shift_id: str, employee_id: str):
        shift = self.shifts.get(shift_id)
        if shift is None:
            self._error(
                ValidationErrorType.MISSING_SHIFT,
                f"Shift {shift_id} referenced by assignment was not provided.",
                shift_id, employee_id,
            )
            return

        employee = self.employees.get(employee_id)
        if employee is None:
            self._error(
                ValidationErrorType.MISSING_EMPLOYEE,
                f"Employee {employee_id} referenced by assignment was not provided.",
                shift_id, employee_id,
            )
            return

        name = employee.display_name

        if not employee.is_active:
            self._error(
                ValidationErrorType.INACTIVE_EMPLOYEE,
                f"{name} is not active.",
                shift_id, employee_id,
            )

        requirement = shift.role_needed
        if requirement.kind != RequirementKind.ANY and not requirement.matches(employee.role):
            self._error(
                ValidationErrorType.ROLE_MISMATCH,
                f"{name} does not match required role {requirement.label}.",
                shift_id, employee_id,
            )

        windows = self.availability.get(employee_id, [])
        if not coverage_for_shift(windows, shift).available:
            self._error(
                ValidationErrorType.AVAILABILITY,
                f"{name} is not available for shift {shift_id}.",
                shift_id, employee_id,
            )

        self.hours_by_employee[employee_id] += shift.hours
        self.blocks_by_employee[employee_id].append(
            TimeBlock(shift_id=shift_id, start=shift.start, end=shift.end)
        )

    def _check_weekly_caps(self):
        for employee_id, hours in self.hours_by_employee.items():
            employee = self.employees[employee_id]
            if hours > employee.weekly_cap:
                self._error(
                    ValidationErrorType.WEEKLY_CAP,
                    f"{employee.display_name} exceeds weekly cap "
                    f"({hours:.2f} > {_format_cap(employee.weekly_cap)}).",
                    employee_id=employee_id,
                )

    def _check_overlaps(self):
        for employee_id, blocks in self.blocks_by_employee.items():
            name = self.employees[employee_id].display_name
            for i, first in enumerate(blocks):
                for second in blocks[i + 1:]:
                    if overlaps([first], second.start, second.end):
                        self._error(
                            ValidationErrorType.OVERLAP,
                            f"{name} has overlapping shifts {first.shift_id} and {second.shift_id}.",
                            shift_id=f"{first.shift_id},{second.shift_id}",
                            employee_id=employee_id,
                        )


def validate_schedule(
    assignments,
    shifts,
    employees,
    availability,
) -> list[ValidationError]:
    """
    Re-check assignments against the raw shift/employee/availability records.

    Returns:
        list of ValidationError, empty when every assignment is valid
    """
    shift_map = {shift.id: shift for shift in normalize_shifts(shifts)}
    validator = AssignmentValidator(
        shifts=shift_map,
        employees=normalize_employees(employees),
        availability=normalize_availability(availability),
    )
    return validator.validate(assignments)
