import pytest
from datetime import datetime

from careshift.services.scheduling.normalizer import (
    SHIFT_ID_KEYS,
    build_schedule_context,
    lookup,
    normalize_assignments,
    normalize_availability,
    normalize_employees,
    normalize_shifts,
    parse_role_requirement,
)
from careshift.services.scheduling.types import (
    DEFAULT_WEEKLY_CAP,
    RequirementKind,
    ScheduleInputError,
)

from conftest import TEST_DAY, make_employee, make_shift, make_window


class TestLookup:
    def test_top_level_first(self):
        record = {"id": "top", "fields": {"id": "nested"}}
        assert lookup(record, ["id"]) == "top"

    def test_alias_order(self):
        record = {"shiftId": "b", "shift_id": "a"}
        assert lookup(record, SHIFT_ID_KEYS) == "a"

    def test_falls_back_to_field_bag(self):
        record = {"fields": {"Shift Id": "s9"}}
        assert lookup(record, SHIFT_ID_KEYS) == "s9"

    def test_missing(self):
        assert lookup({"fields": "not a bag"}, ["id"]) is None


class TestRoleRequirement:
    @pytest.mark.parametrize("value", [None, "", "  ", "Either", "either"])
    def test_any_role(self, value):
        assert parse_role_requirement(value).kind == RequirementKind.ANY

    def test_exact(self):
        req = parse_role_requirement(" cna ")
        assert req.kind == RequirementKind.EXACT
        assert req.matches("CNA") and not req.matches("CMA")

    def test_either_of_two(self):
        req = parse_role_requirement("CNA_OR_CMA")
        assert req.kind == RequirementKind.ONE_OF
        assert req.matches("cna") and req.matches("CMA")
        assert not req.matches("RN")
        assert req.label == "CNA_OR_CMA"


class TestNormalizeEmployees:
    def test_flat_record(self):
        employees = normalize_employees([make_employee("emp1", role="cna", weekly_cap="36")])
        emp = employees["emp1"]
        assert emp.role == "CNA"
        assert emp.status == "active"
        assert emp.weekly_cap == 36.0

    def test_field_bag_record(self, airtable_employee):
        emp = normalize_employees([airtable_employee])["recEMP1"]
        assert emp.name == "Dana Reyes"
        assert emp.role == "CMA"
        assert emp.weekly_cap == 32.0

    def test_status_defaults_to_active(self):
        emp = normalize_employees([{"id": "e1"}])["e1"]
        assert emp.is_active is True
        assert emp.status == "active"

    def test_status_is_case_insensitive(self):
        emp = normalize_employees([{"id": "e1", "status": " Inactive "}])["e1"]
        assert emp.is_active is False

    @pytest.mark.parametrize("cap", [None, "abc", "-5", 0, float("inf"), "inf"])
    def test_bad_cap_falls_back_to_default(self, cap):
        emp = normalize_employees([make_employee("e1", weekly_cap=cap)])["e1"]
        assert emp.weekly_cap == DEFAULT_WEEKLY_CAP

    def test_cap_reads_leading_number(self):
        emp = normalize_employees([make_employee("e1", weekly_cap="32.5 hours")])["e1"]
        assert emp.weekly_cap == 32.5

    def test_record_without_id_is_excluded(self):
        employees = normalize_employees([{"name": "No Id", "role": "CNA"}, make_employee("e2")])
        assert list(employees) == ["e2"]


class TestNormalizeAvailability:
    def test_indexed_under_each_linked_employee(self):
        window = make_window("a1", ["emp1", "emp2"], TEST_DAY)
        availability = normalize_availability([window])
        assert set(availability) == {"emp1", "emp2"}
        assert availability["emp1"][0].start == datetime(2024, 5, 1, 7)
        assert availability["emp1"][0].record_id == "a1"

    def test_unavailable_windows_are_dropped(self):
        window = make_window("a1", "emp1", TEST_DAY, window_type="Unavailable")
        assert normalize_availability([window]) == {}

    def test_preferred_flag(self):
        windows = [
            make_window("a1", "emp1", TEST_DAY, window_type="Preferred"),
            make_window("a2", "emp1", TEST_DAY),
        ]
        flags = [w.preferred for w in normalize_availability(windows)["emp1"]]
        assert flags == [True, False]

    def test_unparsable_window_is_dropped(self):
        window = make_window("a1", "emp1", "someday", start="later", end="much later")
        assert normalize_availability([window]) == {}

    def test_window_without_employee_is_dropped(self):
        window = make_window("a1", [], TEST_DAY)
        assert normalize_availability([window]) == {}

    def test_overnight_window(self):
        window = make_window("a1", "emp1", TEST_DAY, start="20:00", end="08:00")
        normalized = normalize_availability([window])["emp1"][0]
        assert normalized.end == datetime(2024, 5, 2, 8)


class TestNormalizeShifts:
    def test_derives_hours(self):
        shift = normalize_shifts([make_shift("s1", TEST_DAY, 7)])[0]
        assert shift.hours == 12.0
        assert shift.start == datetime(2024, 5, 1, 7)

    def test_either_collapses_to_any(self):
        shift = normalize_shifts([make_shift("s1", TEST_DAY, 7, role="Either")])[0]
        assert shift.role_needed.kind == RequirementKind.ANY

    def test_missing_role_means_any(self):
        record = make_shift("s1", TEST_DAY, 7)
        del record["role_needed"]
        assert normalize_shifts([record])[0].role_needed.kind == RequirementKind.ANY

    def test_overnight_from_time_of_day(self):
        record = {"id": "s1", "date": TEST_DAY, "start_time": "22:00", "end_time": "06:00"}
        shift = normalize_shifts([record])[0]
        assert shift.end == datetime(2024, 5, 2, 6)
        assert shift.hours == 8.0

    def test_missing_times_kept_without_hours(self):
        shift = normalize_shifts([{"id": "s1", "start_time": "07:00", "end_time": "19:00"}])[0]
        assert shift.has_times is False
        assert shift.hours == 0.0

    def test_record_without_id_is_excluded(self):
        record = make_shift("s1", TEST_DAY, 7)
        del record["id"]
        assert normalize_shifts([record]) == []

    def test_preserves_input_order(self):
        records = [make_shift(s, TEST_DAY, 7) for s in ["s3", "s1", "s2"]]
        assert [s.id for s in normalize_shifts(records)] == ["s3", "s1", "s2"]


class TestNormalizeAssignments:
    def test_list_form(self):
        records = [
            {"shift_id": "s1", "employee_id": "e1"},
            {"shiftId": "s2", "assigned_employee": "e2"},
            {"shift_id": "s3"},
        ]
        assert normalize_assignments(records) == {"s1": "e1", "s2": "e2"}

    def test_mapping_form(self):
        assert normalize_assignments({"s1": "e1", "s2": None}) == {"s1": "e1"}

    def test_none(self):
        assert normalize_assignments(None) == {}

    def test_wrong_shape_raises(self):
        with pytest.raises(ScheduleInputError):
            normalize_assignments(42)


class TestShapeErrors:
    def test_non_list_shifts(self):
        with pytest.raises(ScheduleInputError, match="shifts must be a list"):
            build_schedule_context("s1", [], [])

    def test_non_mapping_record(self):
        with pytest.raises(ScheduleInputError, match=r"employees\[1\]"):
            build_schedule_context([], [make_employee("e1"), "e2"], [])

    def test_is_a_type_error(self):
        with pytest.raises(TypeError):
            normalize_availability({"not": "a list"})
