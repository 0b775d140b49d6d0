"""
Schedule generator - public entry points.

Both functions are pure: they normalize fresh copies of the input records on
every call, so concurrent runs never share state.
"""

from .normalizer import build_schedule_context
from .solver import solve_schedule
from .types import ScheduleResult, ValidationError
from .validator import validate_schedule


def run_schedule(
    shifts,
    employees,
    availability,
    existing_assignments=None,
) -> ScheduleResult:
    """
    Assign employees to shifts.

    Args:
        shifts: shift records, processed in list order
        employees: employee records
        availability: availability records
        existing_assignments: prior pairings to keep when still valid, either
            a list of {shift_id, employee_id} records or a shiftId -> employeeId mapping

    Returns:
        ScheduleResult containing:
        - assignments: one per shift, employee_id None when unfilled
        - issues: why shifts were left unfilled or pairings released
        - totals_by_employee: hours and assignment counts for every employee

    Raises:
        ScheduleInputError: if an argument is not a list/mapping of records

    Example:
        result = run_schedule(shift_rows, employee_rows, availability_rows)
        payload = result.to_dict()
    """
    context = build_schedule_context(shifts, employees, availability, existing_assignments)
    return solve_schedule(context)


def validate_assignments(
    assignments,
    shifts,
    employees,
    availability,
) -> list[ValidationError]:
    """
    Re-check an assignment list (possibly edited by hand) against the same
    rules the solver enforces.
    """
    return validate_schedule(assignments, shifts, employees, availability)
