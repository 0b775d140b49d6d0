"""
Scheduling service package.

Usage:
    from careshift.services.scheduling import run_schedule, validate_assignments

    result = run_schedule(shifts, employees, availability, existing_assignments)
    errors = validate_assignments(result.assignments, shifts, employees, availability)

    # Or build the canonical context separately for inspection/testing
    from careshift.services.scheduling import build_schedule_context, solve_schedule

    context = build_schedule_context(shifts, employees, availability)
    result = solve_schedule(context)
"""

from .types import (
    Assignment,
    AvailabilityWindow,
    Employee,
    EmployeeTotals,
    Issue,
    IssueType,
    RequirementKind,
    RoleRequirement,
    ScheduleContext,
    ScheduleInputError,
    ScheduleResult,
    Shift,
    TimeBlock,
    ValidationError,
    ValidationErrorType,
)
from .normalizer import build_schedule_context
from .generator import run_schedule, validate_assignments
from .solver import solve_schedule

__all__ = [
    # Types
    "Assignment",
    "AvailabilityWindow",
    "Employee",
    "EmployeeTotals",
    "Issue",
    "IssueType",
    "RequirementKind",
    "RoleRequirement",
    "ScheduleContext",
    "ScheduleInputError",
    "ScheduleResult",
    "Shift",
    "TimeBlock",
    "ValidationError",
    "ValidationErrorType",
    # Main entry points
    "run_schedule",
    "validate_assignments",
    # Lower-level functions
    "build_schedule_context",
    "solve_schedule",
]
