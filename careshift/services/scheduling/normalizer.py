"""
Normalizer for scheduling input.
Converts loosely-shaped records (flat, or with a nested "fields" bag as
returned by record stores) into the canonical types.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Optional

from .time_math import combine, hours_between, normalize_range
from .types import (
    ANY_ROLE,
    DEFAULT_WEEKLY_CAP,
    AvailabilityWindow,
    Employee,
    RequirementKind,
    RoleRequirement,
    ScheduleContext,
    ScheduleInputError,
    Shift,
)


FIELDS_KEY = "fields"

EMPLOYEE_ID_KEYS = ["id", "employee_id", "employeeId"]
EMPLOYEE_NAME_KEYS = ["name", "Name"]
EMPLOYEE_ROLE_KEYS = ["role"]
EMPLOYEE_STATUS_KEYS = ["status"]
EMPLOYEE_CAP_KEYS = ["weekly_cap", "weeklyCap", "Weekly Cap"]

AVAILABILITY_ID_KEYS = ["id", "availability_id", "availabilityId"]
AVAILABILITY_EMPLOYEE_KEYS = ["employee_id", "employee", "Employee", "employees", "Employee ID", "employeeId"]
AVAILABILITY_TYPE_KEYS = ["type", "Type"]

SHIFT_ID_KEYS = ["id", "shift_id", "Shift Id", "shiftId"]
SHIFT_ROLE_KEYS = ["role_needed", "roleNeeded", "role", "Role"]

DATE_KEYS = ["date", "Date"]
START_KEYS = ["start_time", "start", "Start"]
END_KEYS = ["end_time", "end", "End"]

ASSIGNMENT_SHIFT_KEYS = ["shift_id", "shiftId", "id"]
ASSIGNMENT_EMPLOYEE_KEYS = ["employee_id", "employeeId", "assigned_employee"]

EITHER_TOKEN = "EITHER"
ONE_OF_SEPARATOR = "_OR_"
UNAVAILABLE = "unavailable"
PREFERRED = "preferred"

_LEADING_FLOAT = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def lookup(record: Mapping, keys: list[str]) -> Any:
    """Return the first alias present on the record, then in its field bag."""
    for key in keys:
        if key in record:
            return record[key]
    fields = record.get(FIELDS_KEY)
    if not isinstance(fields, Mapping):
        return None
    for key in keys:
        if key in fields:
            return fields[key]
    return None


def normalize_role(value) -> str:
    return str(value or "").strip().upper()


def parse_role_requirement(value) -> RoleRequirement:
    token = normalize_role(value or EITHER_TOKEN)
    if not token or token == EITHER_TOKEN:
        return ANY_ROLE
    if ONE_OF_SEPARATOR in token:
        roles = tuple(r for r in token.split(ONE_OF_SEPARATOR) if r)
        if len(roles) > 1:
            return RoleRequirement(RequirementKind.ONE_OF, roles)
    return RoleRequirement(RequirementKind.EXACT, (token,))


def _as_id(value) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _parse_float(value) -> float:
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(0)) if match else math.nan


def _require_list(records, name: str) -> list:
    if records is None:
        return []
    if not isinstance(records, (list, tuple)):
        raise ScheduleInputError(f"{name} must be a list, got {type(records).__name__}")
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ScheduleInputError(
                f"{name}[{index}] must be a mapping, got {type(record).__name__}"
            )
    return list(records)


def normalize_employees(records) -> dict[str, Employee]:
    employees: dict[str, Employee] = {}
    for record in _require_list(records, "employees"):
        emp_id = _as_id(lookup(record, EMPLOYEE_ID_KEYS))
        if not emp_id:
            continue

        cap = _parse_float(lookup(record, EMPLOYEE_CAP_KEYS))
        if not math.isfinite(cap) or cap <= 0:
            cap = DEFAULT_WEEKLY_CAP

        employees[emp_id] = Employee(
            id=emp_id,
            name=str(lookup(record, EMPLOYEE_NAME_KEYS) or ""),
            role=normalize_role(lookup(record, EMPLOYEE_ROLE_KEYS)),
            status=str(lookup(record, EMPLOYEE_STATUS_KEYS) or "Active").strip().lower(),
            weekly_cap=cap,
        )
    return employees


def normalize_availability(records) -> dict[str, list[AvailabilityWindow]]:
    """Index usable availability windows by employee id."""
    availability: dict[str, list[AvailabilityWindow]] = {}

    for record in _require_list(records, "availability"):
        employee_field = lookup(record, AVAILABILITY_EMPLOYEE_KEYS)
        if isinstance(employee_field, (list, tuple)):
            employee_ids = [i for i in (_as_id(v) for v in employee_field) if i]
        else:
            employee_ids = [i for i in [_as_id(employee_field)] if i]
        if not employee_ids:
            continue

        window_type = str(lookup(record, AVAILABILITY_TYPE_KEYS) or "Available").strip().lower()
        if window_type == UNAVAILABLE:
            continue

        date_value = lookup(record, DATE_KEYS)
        start, end = normalize_range(
            combine(date_value, lookup(record, START_KEYS)),
            combine(date_value, lookup(record, END_KEYS)),
        )
        if start is None:
            continue

        record_id = _as_id(lookup(record, AVAILABILITY_ID_KEYS))
        for employee_id in employee_ids:
            availability.setdefault(employee_id, []).append(AvailabilityWindow(
                employee_id=employee_id,
                start=start,
                end=end,
                preferred=window_type == PREFERRED,
                record_id=record_id,
            ))

    return availability


def normalize_shifts(records) -> list[Shift]:
    shifts = []
    for record in _require_list(records, "shifts"):
        shift_id = _as_id(lookup(record, SHIFT_ID_KEYS))
        if not shift_id:
            continue

        date_value = lookup(record, DATE_KEYS)
        start, end = normalize_range(
            combine(date_value, lookup(record, START_KEYS)),
            combine(date_value, lookup(record, END_KEYS)),
        )
        shifts.append(Shift(
            id=shift_id,
            role_needed=parse_role_requirement(lookup(record, SHIFT_ROLE_KEYS)),
            start=start,
            end=end,
            hours=hours_between(start, end),
        ))
    return shifts


def normalize_assignments(records) -> dict[str, str]:
    """Accepts [{shift_id, employee_id}, ...] or {shift_id: employee_id}."""
    existing: dict[str, str] = {}
    if records is None:
        return existing

    if isinstance(records, Mapping):
        pairs = records.items()
    elif isinstance(records, (list, tuple)):
        pairs = [
            (lookup(r, ASSIGNMENT_SHIFT_KEYS), lookup(r, ASSIGNMENT_EMPLOYEE_KEYS))
            for r in _require_list(records, "existing_assignments")
        ]
    else:
        raise ScheduleInputError(
            f"existing_assignments must be a list or mapping, got {type(records).__name__}"
        )

    for shift_id, employee_id in pairs:
        shift_id, employee_id = _as_id(shift_id), _as_id(employee_id)
        if shift_id and employee_id:
            existing[shift_id] = employee_id
    return existing


def build_schedule_context(
    shifts,
    employees,
    availability,
    existing_assignments=None,
) -> ScheduleContext:
    return ScheduleContext(
        shifts=normalize_shifts(shifts),
        employees=normalize_employees(employees),
        availability=normalize_availability(availability),
        existing_assignments=normalize_assignments(existing_assignments),
    )
