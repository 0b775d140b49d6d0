import pytest
from datetime import date, datetime, timedelta


TEST_DAY = "2024-05-01"


def day_after(day: str, days: int = 1) -> str:
    return (date.fromisoformat(day) + timedelta(days=days)).isoformat()


def make_shift(shift_id: str, day: str, start_hour: int, length: int = 12, role: str = "CNA") -> dict:
    # full UTC timestamps, end may roll into the next day
    start = datetime.fromisoformat(f"{day}T00:00:00") + timedelta(hours=start_hour)
    end = start + timedelta(hours=length)
    return {
        "id": shift_id,
        "role_needed": role,
        "date": day,
        "start_time": start.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        "end_time": end.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
    }


def make_employee(emp_id: str, role: str = "CNA", weekly_cap=40, **extras) -> dict:
    record = {
        "id": emp_id,
        "role": role,
        "weekly_cap": weekly_cap,
        "status": "Active",
        "name": emp_id,
    }
    record.update(extras)
    return record


def make_window(window_id: str, emp_id, day: str, start: str = "07:00", end: str = "19:00",
                window_type: str = "Available") -> dict:
    return {
        "id": window_id,
        "employee_id": emp_id,
        "date": day,
        "start_time": start,
        "end_time": end,
        "type": window_type,
    }


@pytest.fixture
def day_shift() -> dict:
    return make_shift("shift1", TEST_DAY, 7)


@pytest.fixture
def two_cnas() -> list[dict]:
    return [make_employee("emp1"), make_employee("emp2")]


@pytest.fixture
def airtable_employee() -> dict:
    # record store layout: metadata at top level, data in "fields"
    return {
        "id": "recEMP1",
        "createdTime": "2024-04-01T00:00:00.000Z",
        "fields": {
            "Name": "Dana Reyes",
            "role": " cma ",
            "status": "Active",
            "Weekly Cap": "32",
        },
    }
