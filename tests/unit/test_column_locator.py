"""
Header/Column Locator Unit Tests

Tests the pure header detection and column mapping logic:
- Header row found by keyword within the first rows
- Fallback to row 0 when nothing matches
- Left-to-right first match per field
- Required/optional field reporting

Unit Size: Pure functions, no DB
Failure Modes:
- Title rows above the header mistaken for data
- Locator raising instead of falling back
- Status treated as required
"""

import pytest

from opstracker.services.column_locator import (
    FIELD_KEYWORDS, NOT_FOUND, ColumnMapping, find_header_row, locate_columns
)


class TestFindHeaderRow:
    """Header row detection."""

    def test_header_in_first_row(self):
        rows = [["Task", "Engineer", "Service", "Week", "Status"], ["x", "Ali", "VPN", 1, ""]]
        assert find_header_row(rows) == 0

    def test_header_below_title_rows(self):
        rows = [
            ["Cyber Security Operations"],
            [None, None],
            ["Task Description", "Engineer", "Services List", "Week", "Status"],
            ["Patch", "Omar", "FCR", 1, "done"],
        ]
        assert find_header_row(rows) == 2

    def test_no_keywords_falls_back_to_row_zero(self):
        rows = [["alpha", "beta"], [1, 2], ["gamma", None]]
        assert find_header_row(rows) == 0

    def test_empty_sheet_falls_back_to_row_zero(self):
        assert find_header_row([]) == 0

    def test_only_scans_first_rows(self):
        rows = [["filler"]] * 10 + [["Task", "Engineer", "Service", "Week"]]
        assert find_header_row(rows, scan_rows=10) == 0
        assert find_header_row(rows, scan_rows=11) == 10

    def test_single_keyword_is_enough(self):
        rows = [["Monthly report"], ["", "Week"]]
        assert find_header_row(rows) == 1

    def test_keyword_match_is_case_insensitive(self):
        rows = [["intro"], ["TASK", "ENGINEER"]]
        assert find_header_row(rows) == 1


class TestLocateColumns:
    """Field to column index mapping."""

    def test_standard_header(self):
        mapping = locate_columns(["Task", "Engineer", "Service", "Week", "Status"])
        assert mapping.as_dict() == {"task": 0, "engineer": 1, "service": 2, "week": 3, "status": 4}
        assert mapping.missing_required() == []

    def test_alternate_keywords(self):
        mapping = locate_columns(["Notes", "Assigned To", "Service Name", "Week #", "State"])
        assert mapping.index("task") == 0
        assert mapping.index("engineer") == 1
        assert mapping.index("status") == 4

    def test_first_match_wins(self):
        mapping = locate_columns(["Service", "Backup Service", "Task"])
        assert mapping.index("service") == 0

    def test_missing_fields_are_not_found(self):
        mapping = locate_columns(["Task", "Engineer", "Week"])
        assert mapping.index("service") == NOT_FOUND
        assert mapping.index("status") == NOT_FOUND
        assert mapping.missing_required() == ["service"]

    def test_status_is_optional(self):
        mapping = locate_columns(["Task", "Engineer", "Service", "Week"])
        assert mapping.index("status") == NOT_FOUND
        assert mapping.missing_required() == []

    def test_blank_and_numeric_cells_ignored(self):
        mapping = locate_columns([None, 42, "Task", "", "Engineer", "Service", "Week"])
        assert mapping.as_dict()["task"] == 2
        assert mapping.as_dict()["week"] == 6

    def test_every_field_has_keywords(self):
        mapping = locate_columns([])
        assert set(mapping.as_dict()) == set(FIELD_KEYWORDS)
        assert all(index == NOT_FOUND for index in mapping.as_dict().values())

    def test_adding_a_field_is_a_table_change(self, monkeypatch):
        monkeypatch.setitem(FIELD_KEYWORDS, "priority", ("priority",))
        mapping = locate_columns(["Task", "Priority"])
        assert mapping.index("priority") == 1


class TestColumnMapping:

    def test_unknown_field_is_not_found(self):
        assert ColumnMapping().index("task") == NOT_FOUND

    @pytest.mark.parametrize("dropped", ["task", "engineer", "service", "week"])
    def test_each_required_field_reported(self, dropped):
        columns = {"task": 0, "engineer": 1, "service": 2, "week": 3, "status": 4}
        columns[dropped] = NOT_FOUND
        assert ColumnMapping(columns=columns).missing_required() == [dropped]
