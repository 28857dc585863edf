"""
Spreadsheet import service for weekly task workbooks.

Flow: read workbook -> pick the month's sheet -> locate header and columns
-> validate rows -> preview (no writes) or commit (one transaction).
A commit returns the ids it created; undo deletes exactly those ids.
Month and year of committed tasks come from the caller, never the sheet.
Descriptions are stored HTML-escaped like API-created ones and unescaped on export.
"""

import html
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from opstracker.config import settings
from opstracker.models import Task, TaskPriority, TaskStatus
from opstracker.schemas import CommitResult, ImportBatch, PreviewSummary, UndoResult
from opstracker.services.column_locator import ColumnMapping, find_header_row, locate_columns
from opstracker.services.errors import ImportStructureError, InvalidUndoRequestError
from opstracker.services.registry import ensure_engineers, ensure_services, refresh_counts
from opstracker.services.row_validator import ValidationResult, validate_rows
from opstracker.services.spreadsheet import (
    detect_month, normalize_month, read_workbook, select_sheet
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Task", "Engineer", "Service", "Week", "Status", "Priority"]

_STATUS_LABELS = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
}


@dataclass
class ParsedSheet:
    sheet_name: str
    header_row: int
    mapping: ColumnMapping
    result: ValidationResult


def parse_task_sheet(content: bytes, filename: str = "", month: Optional[str] = None) -> ParsedSheet:
    """
    Run the read/locate/validate steps shared by preview and commit.

    Raises ImportStructureError when a required column cannot be found.
    """
    sheets = read_workbook(content, filename)
    sheet_month = month or detect_month(filename)
    sheet_name = select_sheet(list(sheets.keys()), sheet_month)
    rows = sheets[sheet_name]
    logger.info(f"📂 Using sheet: {sheet_name} ({len(rows)} rows)")

    header_row = find_header_row(rows, settings.header_scan_rows)
    header = rows[header_row] if rows else []
    mapping = locate_columns(header)
    logger.info(f"📋 Header row {header_row}, column mapping: {mapping.as_dict()}")

    missing = mapping.missing_required()
    if missing:
        raise ImportStructureError(
            f"Sheet '{sheet_name}' is missing required column(s): {', '.join(missing)}"
        )

    result = validate_rows(rows, header_row, mapping)
    for row in result.invalid[:3]:
        logger.debug(f"⚠️ Invalid row {row.row_number}: {row.reason}")

    return ParsedSheet(sheet_name=sheet_name, header_row=header_row, mapping=mapping, result=result)


def summarize(parsed: ParsedSheet) -> PreviewSummary:
    """Aggregate validated rows into the numbers shown before committing."""
    valid = parsed.result.valid
    status_counts = Counter(row.status.value for row in valid)
    return PreviewSummary(
        sheet_name=parsed.sheet_name,
        header_row=parsed.header_row,
        total_rows=parsed.result.total,
        valid_rows=len(valid),
        invalid_rows=len(parsed.result.invalid),
        engineers=sorted({row.engineer for row in valid}),
        services=sorted({row.service for row in valid}),
        status_counts={status.value: status_counts.get(status.value, 0) for status in TaskStatus},
        column_map=parsed.mapping.as_dict(),
    )


def preview_import(content: bytes, filename: str = "", month: Optional[str] = None) -> PreviewSummary:
    """Analyse a workbook without writing anything."""
    month_name = normalize_month(month) if month else None
    summary = summarize(parse_task_sheet(content, filename, month_name))
    logger.info(
        f"🔍 Preview of '{filename}': {summary.valid_rows} valid, "
        f"{summary.invalid_rows} invalid of {summary.total_rows}"
    )
    return summary


def commit_import(db: Session, content: bytes, filename: str, month: str, year: int) -> CommitResult:
    """
    Persist every valid row as a task stamped with month/year.

    The whole batch is one transaction: any database error rolls it back and
    is re-raised, so an import is either complete or absent. Re-importing the
    same file creates duplicates.
    """
    month_name = normalize_month(month)
    parsed = parse_task_sheet(content, filename, month_name)
    valid = parsed.result.valid
    priority = TaskPriority(settings.default_priority)

    logger.info(f"📥 Importing {len(valid)} task(s) from '{filename}' into {month_name} {year}")

    try:
        ensure_engineers(db, (row.engineer for row in valid))
        ensure_services(db, (row.service for row in valid))

        tasks = [
            Task(
                service=row.service,
                engineer=row.engineer,
                week=row.week,
                month=month_name,
                year=year,
                status=row.status,
                priority=priority,
                description=html.escape(row.description) if row.description else None,
            )
            for row in valid
        ]
        db.add_all(tasks)
        db.flush()
        task_ids = [task.id for task in tasks]

        refresh_counts(
            db,
            engineers=(row.engineer for row in valid),
            services=(row.service for row in valid),
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Import of '{filename}' rolled back: {e}")
        raise

    skipped = parsed.result.total - len(task_ids)
    logger.info(f"✅ Imported {len(task_ids)} task(s), skipped {skipped}")

    return CommitResult(
        imported=len(task_ids),
        skipped=skipped,
        month=month_name,
        year=year,
        task_ids=task_ids,
        batch=ImportBatch(
            task_ids=task_ids,
            count=len(task_ids),
            month=month_name,
            year=year,
            timestamp=datetime.utcnow(),
        ),
    )


def undo_import(db: Session, task_ids: Iterable[int]) -> UndoResult:
    """
    Delete exactly the given tasks. Ids that no longer exist, or that were
    already soft-deleted through the API, are ignored.
    """
    ids = sorted({
        task_id for task_id in task_ids
        if isinstance(task_id, int) and not isinstance(task_id, bool) and task_id > 0
    })
    if not ids:
        raise InvalidUndoRequestError("Task IDs are required")

    try:
        live = (Task.id.in_(ids), Task.is_deleted == False)  # noqa: E712
        affected = db.query(Task.engineer, Task.service).filter(*live).all()
        deleted = db.query(Task).filter(*live).delete(synchronize_session=False)
        refresh_counts(
            db,
            engineers=(engineer for engineer, _ in affected),
            services=(service for _, service in affected),
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Undo import failed: {e}")
        raise

    logger.info(f"↩️ Undo import removed {deleted} of {len(ids)} requested task(s)")
    return UndoResult(deleted=deleted)


# ==============================================================================
# EXPORT Functions
# ==============================================================================

def _task_rows(tasks: Sequence[Task]) -> List[dict]:
    return [{
        "Task": html.unescape(t.description or ""),
        "Engineer": t.engineer,
        "Service": t.service,
        "Week": f"Week {t.week}",
        "Status": _STATUS_LABELS.get(t.status, "Pending"),
        "Priority": t.priority.value if t.priority else "",
    } for t in tasks]


def export_tasks(db: Session, month: str, year: int) -> BytesIO:
    """
    Export live tasks of one month as a workbook the importer can read back.
    The sheet is named after the month so sheet selection finds it.
    """
    month_name = normalize_month(month)
    tasks = db.query(Task).filter(
        Task.month == month_name,
        Task.year == year,
        Task.is_deleted == False  # noqa: E712
    ).order_by(Task.week, Task.engineer, Task.id).all()

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame = pd.DataFrame(_task_rows(tasks), columns=EXPORT_COLUMNS)
        frame.to_excel(writer, sheet_name=f"{month_name[:3].upper()} {year}", index=False)
    output.seek(0)

    logger.info(f"📊 Exported {len(tasks)} task(s) for {month_name} {year}")
    return output


def export_template() -> BytesIO:
    """Empty import workbook with example rows and an instructions sheet."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame([
            {"Task": "Review firewall change request", "Engineer": "Jane Doe", "Service": "FCR",
             "Week": "Week 1", "Status": "Completed", "Priority": "medium"},
            {"Task": "Renew VPN certificates", "Engineer": "John Smith", "Service": "VPN",
             "Week": 2, "Status": "In progress", "Priority": "high"},
        ], columns=EXPORT_COLUMNS).to_excel(writer, sheet_name="Tasks", index=False)

        pd.DataFrame({
            "Column": EXPORT_COLUMNS,
            "Description": [
                "Free text describing the work (may be empty)",
                "Engineer name (required)",
                "Service name (required)",
                "Week of the month, 1-4 or 'Week N' (required)",
                "Pending / In progress / Completed (defaults to Completed)",
                "Ignored on import; imported tasks get the default priority",
            ],
        }).to_excel(writer, sheet_name="_Instructions", index=False)
    output.seek(0)
    return output
