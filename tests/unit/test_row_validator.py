"""
Row Validator/Normalizer Unit Tests

Tests conversion of raw rows into candidate task records:
- Valid/invalid classification on service, engineer and week
- Week label normalisation ("Week N") and range check
- Status capitalisation, default and category mapping
- Blank rows ignored

Unit Size: Pure functions, no DB
Failure Modes:
- Row with a blank required field accepted
- Optional task text treated as required
- Week normalisation not idempotent
"""

import pytest

from opstracker.models import TaskStatus
from opstracker.services.column_locator import locate_columns
from opstracker.services.row_validator import (
    build_candidate, normalize_status, normalize_week, status_category,
    validate_rows, week_number
)

HEADER = ["Task", "Engineer", "Service", "Week", "Status"]
MAPPING = locate_columns(HEADER)


class TestNormalizeWeek:

    def test_integer(self):
        assert normalize_week(2) == "Week 2"

    def test_whole_float(self):
        assert normalize_week(3.0) == "Week 3"

    def test_numeric_string(self):
        assert normalize_week("3") == "Week 3"

    def test_already_normalized_is_unchanged(self):
        assert normalize_week("Week 2") == "Week 2"

    @pytest.mark.parametrize("value", [1, "4", "Week 3", "wk 2", " 2 "])
    def test_idempotent(self, value):
        once = normalize_week(value)
        assert normalize_week(once) == once

    def test_other_text_is_wrapped(self):
        assert normalize_week("wk 2") == "Week wk 2"

    def test_week_number_extraction(self):
        assert week_number("Week 4") == 4
        assert week_number("Week wk 2") == 2
        assert week_number("Week first") is None
        assert week_number("Week -1") is None
        assert week_number("Week 2.5") is None


class TestNormalizeStatus:

    def test_first_letter_only(self):
        assert normalize_status("in progress") == "In progress"
        assert normalize_status("pENDING") == "PENDING"

    def test_blank_defaults_to_completed(self):
        assert normalize_status("") == "Completed"
        assert normalize_status(None) == "Completed"
        assert normalize_status("   ") == "Completed"

    @pytest.mark.parametrize("label,expected", [
        ("Completed", TaskStatus.COMPLETED),
        ("Done", TaskStatus.COMPLETED),
        ("In progress", TaskStatus.IN_PROGRESS),
        ("In-progress", TaskStatus.IN_PROGRESS),
        ("Pending", TaskStatus.PENDING),
        ("Waiting on vendor", TaskStatus.PENDING),
    ])
    def test_status_category(self, label, expected):
        assert status_category(label) == expected


class TestRowClassification:

    def test_complete_row_is_valid(self):
        row = build_candidate(["Fix firewall", "Ali", "VPN", 2, "pending"], 1, MAPPING)
        assert row.valid
        assert row.engineer == "Ali"
        assert row.service == "VPN"
        assert row.week_label == "Week 2"
        assert row.week == 2
        assert row.status_label == "Pending"
        assert row.status == TaskStatus.PENDING

    def test_missing_task_text_still_valid(self):
        row = build_candidate(["", "Sara", "SOC", 1, ""], 2, MAPPING)
        assert row.valid
        assert row.description == ""
        assert row.status_label == "Completed"
        assert row.status == TaskStatus.COMPLETED

    @pytest.mark.parametrize("blank_index,reason", [
        (1, "missing engineer"),
        (2, "missing service"),
        (3, "missing week"),
    ])
    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_single_missing_required_field_is_invalid(self, blank_index, reason, blank):
        cells = ["Audit", "Lina", "FCR", 1, "Completed"]
        cells[blank_index] = blank
        row = build_candidate(cells, 1, MAPPING)
        assert not row.valid
        assert row.reason == reason

    @pytest.mark.parametrize("week", [0, 5, "Week 7", "soon", -1, 2.5, "Week -2", "3.5"])
    def test_week_outside_month_is_invalid(self, week):
        row = build_candidate(["Audit", "Lina", "FCR", week, ""], 1, MAPPING)
        assert not row.valid
        assert row.reason.startswith("week out of range")

    def test_values_are_trimmed(self):
        row = build_candidate(["  Patch ", " Omar ", " FCR ", " Week 4 ", " in progress"], 1, MAPPING)
        assert row.valid
        assert (row.description, row.engineer, row.service) == ("Patch", "Omar", "FCR")
        assert row.week_label == "Week 4"
        assert row.status == TaskStatus.IN_PROGRESS

    def test_short_row_treated_as_blank_cells(self):
        row = build_candidate(["Only text", "Ali"], 1, MAPPING)
        assert not row.valid
        assert row.reason == "missing service"

    def test_missing_status_column_defaults(self):
        mapping = locate_columns(["Task", "Engineer", "Service", "Week"])
        row = build_candidate(["x", "Ali", "VPN", 1], 1, mapping)
        assert row.status_label == "Completed"


class TestValidateRows:

    def test_rows_after_header_only(self):
        rows = [["Title"], HEADER, ["a", "Ali", "VPN", 1, ""], ["b", "", "VPN", 1, ""]]
        result = validate_rows(rows, 1, MAPPING)
        assert result.total == 2
        assert [r.row_number for r in result.rows] == [2, 3]
        assert len(result.valid) == 1
        assert len(result.invalid) == 1

    def test_blank_rows_ignored(self):
        rows = [HEADER, [None, None, None, None, None], ["a", "Ali", "VPN", 1, ""], ["", " ", None]]
        result = validate_rows(rows, 0, MAPPING)
        assert result.total == 1

    def test_header_only_sheet(self):
        result = validate_rows([HEADER], 0, MAPPING)
        assert result.total == 0
        assert result.valid == []
