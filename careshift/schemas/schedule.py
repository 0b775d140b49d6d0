from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from careshift.services.scheduling.normalizer import EMPLOYEE_ID_KEYS, SHIFT_ID_KEYS, lookup


Record = dict[str, Any]


def _require_ids(records: list[Record], keys: list[str], label: str) -> list[Record]:
    for index, record in enumerate(records):
        value = lookup(record, keys)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{label} record at index {index} requires an id")
    return records


class ScheduleRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    week_id: str = Field(min_length=1)
    start_date: str = Field(min_length=1)
    end_date: str = Field(min_length=1)
    shift_template: list[Record] = Field(default_factory=list)
    employees: list[Record] = Field(default_factory=list)
    availability: list[Record] = Field(default_factory=list)
    existing_assignments: Optional[Union[list[Record], dict[str, Optional[str]]]] = None

    @field_validator("shift_template")
    @classmethod
    def shifts_have_ids(cls, records: list[Record]) -> list[Record]:
        return _require_ids(records, SHIFT_ID_KEYS, "Shift")

    @field_validator("employees")
    @classmethod
    def employees_have_ids(cls, records: list[Record]) -> list[Record]:
        return _require_ids(records, EMPLOYEE_ID_KEYS, "Employee")


class WebhookStatus(BaseModel):
    ok: bool
    status: int
    text: Optional[str] = None


class ScheduleResponse(BaseModel):
    success: bool
    week_id: str
    start_date: str
    end_date: str
    assignments: list[Record]
    totalsByEmployee: dict[str, Record]
    issues: list[Record]
    zapier: WebhookStatus
    metadata: Record = Field(default_factory=dict)


class ValidateRequest(BaseModel):
    assignments: list[Record] = Field(default_factory=list)
    shift_template: list[Record] = Field(default_factory=list)
    employees: list[Record] = Field(default_factory=list)
    availability: list[Record] = Field(default_factory=list)


class ValidateResponse(BaseModel):
    valid: bool
    errors: list[Record]
