"""
Internal data types for scheduling logic.
Canonical entities are built by the normalizer and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


DEFAULT_WEEKLY_CAP = 40.0
ACTIVE_STATUS = "active"


class ScheduleInputError(TypeError):
    """Raised when the core is called with inputs of the wrong shape."""


class RequirementKind(str, Enum):
    ANY = "ANY"
    EXACT = "EXACT"
    ONE_OF = "ONE_OF"


@dataclass(frozen=True)
class RoleRequirement:
    """Role a shift needs: any role, one exact role, or one of several."""
    kind: RequirementKind
    roles: tuple[str, ...] = ()

    def matches(self, role: str) -> bool:
        role = (role or "").strip().upper()
        if self.kind == RequirementKind.ANY:
            return True
        if self.kind == RequirementKind.EXACT:
            return role == self.roles[0]
        return role in self.roles

    @property
    def label(self) -> str:
        if self.kind == RequirementKind.ANY:
            return "Either"
        if self.kind == RequirementKind.EXACT:
            return self.roles[0]
        return "_OR_".join(self.roles)


ANY_ROLE = RoleRequirement(RequirementKind.ANY)


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    role: str
    status: str = ACTIVE_STATUS
    weekly_cap: float = DEFAULT_WEEKLY_CAP

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class AvailabilityWindow:
    employee_id: str
    start: datetime
    end: datetime
    preferred: bool = False
    record_id: Optional[str] = None


@dataclass(frozen=True)
class Shift:
    """A shift to fill. start/end are None when the source times did not parse."""
    id: str
    role_needed: RoleRequirement
    start: Optional[datetime]
    end: Optional[datetime]
    hours: float = 0.0

    @property
    def has_times(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class TimeBlock:
    """An occupied interval committed to one employee."""
    shift_id: str
    start: Optional[datetime]
    end: Optional[datetime]


@dataclass
class Assignment:
    shift_id: str
    employee_id: Optional[str]
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"shiftId": self.shift_id, "employeeId": self.employee_id}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


class IssueType(str, Enum):
    MISSING_TIME = "missing_time"
    EXISTING_RELEASED = "existing_released"
    ROLE_UNAVAILABLE = "role_unavailable"
    AVAILABILITY = "availability"
    WEEKLY_CAP = "weekly_cap"
    OVERLAP = "overlap"
    AI_PLANNER_ERROR = "ai_planner_error"


@dataclass
class Issue:
    shift_id: Optional[str]
    reason: str
    employee_id: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"shiftId": self.shift_id, "reason": self.reason}
        if self.employee_id is not None:
            data["employeeId"] = self.employee_id
        if self.type is not None:
            data["type"] = self.type
        return data


class ValidationErrorType(str, Enum):
    MISSING_SHIFT = "missing_shift"
    MISSING_EMPLOYEE = "missing_employee"
    INACTIVE_EMPLOYEE = "inactive_employee"
    ROLE_MISMATCH = "role_mismatch"
    AVAILABILITY = "availability"
    WEEKLY_CAP = "weekly_cap"
    OVERLAP = "overlap"


@dataclass
class ValidationError:
    """A finding from re-checking an assignment set."""
    type: ValidationErrorType
    message: str
    shift_id: Optional[str] = None
    employee_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "shiftId": self.shift_id,
            "employeeId": self.employee_id,
            "message": self.message,
        }

    def to_issue(self) -> Issue:
        return Issue(
            shift_id=self.shift_id,
            employee_id=self.employee_id,
            reason=self.message,
            type=self.type.value,
        )


@dataclass
class EmployeeTotals:
    employee_id: str
    name: str
    role: str
    weekly_cap: float
    hours: float
    assignments: int

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "role": self.role,
            "weeklyCap": self.weekly_cap,
            "hours": self.hours,
            "assignments": self.assignments,
        }


@dataclass
class ScheduleContext:
    """All canonical data needed for one scheduling run."""
    shifts: list[Shift]
    employees: dict[str, Employee]
    availability: dict[str, list[AvailabilityWindow]]
    existing_assignments: dict[str, str] = field(default_factory=dict)


@dataclass
class ScheduleResult:
    """Output of the scheduling pass."""
    assignments: list[Assignment]
    issues: list[Issue]
    totals_by_employee: dict[str, EmployeeTotals] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "assignments": [a.to_dict() for a in self.assignments],
            "issues": [i.to_dict() for i in self.issues],
            "totalsByEmployee": {
                emp_id: totals.to_dict()
                for emp_id, totals in self.totals_by_employee.items()
            },
        }
