"""
Turns raw spreadsheet rows into typed candidate task records.

A row is valid when it names a service, an engineer and a week 1-4. The
task text column may be empty. Invalid rows are kept (for counting) but
never materialised as tasks.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from opstracker.config import settings
from opstracker.models import TaskStatus
from opstracker.services.column_locator import ColumnMapping, NOT_FOUND

# Digits that are not part of a signed or decimal number
_WEEK_NUMBER = re.compile(r"(?<![-+.\d])(\d+)(?![.\d])")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_week(value: Any) -> str:
    """
    Normalise a week cell to a "Week N" label.

    Numbers become "Week {n}", strings already starting with "Week" are
    returned unchanged, anything else is wrapped as "Week {value}".
    """
    if isinstance(value, bool):
        value = str(value)
    if isinstance(value, (int, float)):
        number = int(value) if float(value).is_integer() else value
        return f"Week {number}"
    text = _text(value)
    if text.startswith("Week"):
        return text
    return f"Week {text}"


def week_number(label: str) -> Optional[int]:
    """First unsigned whole number inside a week label, or None ("Week -1", "Week 2.5")."""
    match = _WEEK_NUMBER.search(label or "")
    return int(match.group(1)) if match else None


def normalize_status(value: Any) -> str:
    """Upper-case the first letter only; blank falls back to the default status."""
    text = _text(value)
    if not text:
        return settings.default_status
    return text[0].upper() + text[1:]


def status_category(label: str) -> TaskStatus:
    lowered = (label or "").lower()
    if "complete" in lowered or "done" in lowered:
        return TaskStatus.COMPLETED
    if "progress" in lowered:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.PENDING


@dataclass
class CandidateRow:
    row_number: int  # 0-based index within the sheet
    description: str
    engineer: str
    service: str
    week_label: str
    week: Optional[int]
    status_label: str
    status: TaskStatus
    valid: bool
    reason: Optional[str] = None


@dataclass
class ValidationResult:
    rows: List[CandidateRow]

    @property
    def valid(self) -> List[CandidateRow]:
        return [row for row in self.rows if row.valid]

    @property
    def invalid(self) -> List[CandidateRow]:
        return [row for row in self.rows if not row.valid]

    @property
    def total(self) -> int:
        return len(self.rows)


def _cell(row: Sequence[Any], index: int) -> Any:
    if index == NOT_FOUND or index >= len(row):
        return None
    return row[index]


def _is_blank(row: Sequence[Any]) -> bool:
    return all(_text(cell) == "" for cell in row)


def build_candidate(row: Sequence[Any], row_number: int, mapping: ColumnMapping) -> CandidateRow:
    description = _text(_cell(row, mapping.index("task")))
    engineer = _text(_cell(row, mapping.index("engineer")))
    service = _text(_cell(row, mapping.index("service")))
    raw_week = _cell(row, mapping.index("week"))
    status_label = normalize_status(_cell(row, mapping.index("status")))

    week_label = normalize_week(raw_week) if _text(raw_week) else ""
    week = week_number(week_label) if week_label else None

    reason = None
    if not service:
        reason = "missing service"
    elif not engineer:
        reason = "missing engineer"
    elif not week_label:
        reason = "missing week"
    elif week is None or not 1 <= week <= 4:
        reason = f"week out of range: {week_label}"

    return CandidateRow(
        row_number=row_number,
        description=description,
        engineer=engineer,
        service=service,
        week_label=week_label,
        week=week,
        status_label=status_label,
        status=status_category(status_label),
        valid=reason is None,
        reason=reason,
    )


def validate_rows(rows: Sequence[Sequence[Any]], header_index: int, mapping: ColumnMapping) -> ValidationResult:
    """Build a candidate for every non-blank row below the header."""
    candidates = []
    for row_number in range(header_index + 1, len(rows)):
        row = rows[row_number]
        if _is_blank(row):
            continue
        candidates.append(build_candidate(row, row_number, mapping))
    return ValidationResult(rows=candidates)
