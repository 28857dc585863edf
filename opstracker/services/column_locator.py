"""
Header row detection and column mapping.

Both steps are driven by FIELD_KEYWORDS: recognising a new column is a
matter of adding an entry to the table.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

FIELD_KEYWORDS: Dict[str, tuple] = {
    "task": ("task", "description", "note"),
    "engineer": ("engineer", "assign"),
    "service": ("service",),
    "week": ("week",),
    "status": ("status", "state"),
}

REQUIRED_FIELDS = ("task", "engineer", "service", "week")

NOT_FOUND = -1


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def _matches(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


@dataclass
class ColumnMapping:
    """Column index per semantic field; NOT_FOUND (-1) when the header lacks it."""
    columns: Dict[str, int] = field(default_factory=dict)

    def index(self, field_name: str) -> int:
        return self.columns.get(field_name, NOT_FOUND)

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if self.index(name) == NOT_FOUND]

    def as_dict(self) -> Dict[str, int]:
        return dict(self.columns)


def find_header_row(rows: Sequence[Sequence[Any]], scan_rows: int = 10) -> int:
    """
    Index of the first row (within the first scan_rows) that has a cell
    containing any known keyword. Falls back to 0.
    """
    all_keywords = [k for keywords in FIELD_KEYWORDS.values() for k in keywords]
    for index, row in enumerate(rows[:scan_rows]):
        if any(_matches(_cell_text(cell), all_keywords) for cell in row):
            return index
    return 0


def locate_columns(header: Sequence[Any]) -> ColumnMapping:
    """Map each field to the first header cell, left to right, that matches one of its keywords."""
    texts = [_cell_text(cell) for cell in header]
    columns = {}
    for field_name, keywords in FIELD_KEYWORDS.items():
        columns[field_name] = next(
            (index for index, text in enumerate(texts) if text and _matches(text, keywords)),
            NOT_FOUND
        )
    return ColumnMapping(columns=columns)
