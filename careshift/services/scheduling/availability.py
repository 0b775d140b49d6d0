"""
Availability checking utilities.
Determines whether an employee can take a given shift. Shared by the solver
and the validator so both apply the same rules.
"""

from dataclasses import dataclass

from .time_math import covers
from .types import AvailabilityWindow, Employee, Shift


@dataclass(frozen=True)
class Coverage:
    available: bool
    preferred: bool


NO_COVERAGE = Coverage(available=False, preferred=False)


def coverage_for_shift(windows: list[AvailabilityWindow], shift: Shift) -> Coverage:
    """
    Check whether any window fully covers the shift.

    preferred is True only when a covering window is itself marked preferred.
    """
    if not shift.has_times:
        return NO_COVERAGE

    available = False
    preferred = False
    for window in windows:
        if covers(window.start, window.end, shift.start, shift.end):
            available = True
            if window.preferred:
                preferred = True
    return Coverage(available=available, preferred=preferred)


def is_role_eligible(employee: Employee, shift: Shift) -> bool:
    return shift.role_needed.matches(employee.role)


def is_eligible(employee: Employee, shift: Shift) -> bool:
    """Active employee whose role satisfies the shift's requirement."""
    return employee.is_active and is_role_eligible(employee, shift)


def within_cap(employee: Employee, hours_so_far: float, shift: Shift) -> bool:
    return hours_so_far + shift.hours <= employee.weekly_cap
