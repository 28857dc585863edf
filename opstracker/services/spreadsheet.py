"""
Workbook reading and sheet selection for task imports.

Workbooks are read fully into memory with pandas (openpyxl for .xlsx/.xlsm,
xlrd for legacy .xls). Every worksheet comes back as a list of raw rows so
the header can be located anywhere near the top of the sheet.
"""

import calendar
import logging
import math
import os
import re
from io import BytesIO
from typing import Any, Dict, List, Optional

import pandas as pd

from opstracker.config import settings
from opstracker.services.errors import (
    FileTooLargeError, ImportStructureError, InvalidMonthError, UnsupportedFileError
)

logger = logging.getLogger(__name__)

MONTH_NAMES = [name for name in calendar.month_name if name]
_FILENAME_MONTH = re.compile(r"\b(JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)\b")

Row = List[Any]


def normalize_month(value: str) -> str:
    """
    Return the full calendar month name for a month name or abbreviation.

    "mar", "MARCH" and "March" all give "March". Any prefix of at least three
    letters is accepted ("sept" -> "September").
    """
    text = str(value or "").strip().lower()
    if len(text) >= 3:
        for name in MONTH_NAMES:
            if name.lower().startswith(text):
                return name
    raise InvalidMonthError(f"Unknown month: '{value}'")


def detect_month(filename: str) -> Optional[str]:
    """Find a month abbreviation token in an upload's filename (e.g. 'jan- 01 - Tracker.xlsx')."""
    if not filename:
        return None
    match = _FILENAME_MONTH.search(filename.upper())
    if not match:
        return None
    return normalize_month(match.group(1))


def check_upload(filename: str, size: int) -> None:
    """Reject uploads we cannot read before parsing them."""
    extension = os.path.splitext(filename or "")[1].lower()
    if extension not in settings.allowed_extensions:
        allowed = ", ".join(settings.allowed_extensions)
        raise UnsupportedFileError(f"Only Excel files ({allowed}) are allowed")
    if size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise FileTooLargeError(f"File is larger than the {limit_mb}MB limit")


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if value is pd.NaT:
        return None
    return value


def read_workbook(content: bytes, filename: str = "") -> Dict[str, List[Row]]:
    """
    Parse workbook bytes into {sheet name: rows}, preserving sheet order.

    Cells are returned raw: blanks become None and whole-number floats
    become ints, nothing else is coerced.
    """
    try:
        frames = pd.read_excel(BytesIO(content), sheet_name=None, header=None, dtype=object)
    except Exception as e:
        logger.error(f"❌ Could not read workbook '{filename}': {e}")
        raise UnsupportedFileError(f"Could not read '{filename or 'upload'}' as a workbook: {e}") from e

    sheets: Dict[str, List[Row]] = {}
    for sheet_name, frame in frames.items():
        sheets[str(sheet_name)] = [
            [_clean_cell(cell) for cell in record]
            for record in frame.itertuples(index=False, name=None)
        ]

    logger.info(f"📂 Read {len(sheets)} sheet(s) from '{filename}': {list(sheets.keys())}")
    return sheets


def select_sheet(sheet_names: List[str], month: Optional[str] = None) -> str:
    """
    Pick the worksheet holding the tasks for a month.

    Workbooks are kept one sheet per month, so a sheet whose name contains
    the month's three-letter abbreviation wins; otherwise the first sheet.
    """
    if not sheet_names:
        raise ImportStructureError("Workbook contains no worksheets")

    if month:
        abbreviation = normalize_month(month)[:3].upper()
        for name in sheet_names:
            if abbreviation in name.upper():
                logger.info(f"✅ Found sheet matching month {abbreviation}: {name}")
                return name

    return sheet_names[0]
