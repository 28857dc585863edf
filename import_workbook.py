#!/usr/bin/env python3
"""
Import a monthly task workbook from the command line.

Usage:
    python import_workbook.py "MAR - Task Tracker.xlsx" --month March --year 2025
    python import_workbook.py tracker.xlsx --month mar --year 2025 --preview
"""
import argparse
import json
import logging
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from opstracker.database import SessionLocal, init_db
from opstracker.services.errors import TaskImportError
from opstracker.services.spreadsheet import check_upload
from opstracker.services.task_import import commit_import, preview_import

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import weekly tasks from an Excel workbook")
    parser.add_argument("path", help="Workbook to import (.xlsx, .xlsm, .xls)")
    parser.add_argument("--month", required=True, help="Month the tasks belong to (name or abbreviation)")
    parser.add_argument("--year", required=True, type=int, help="Year the tasks belong to")
    parser.add_argument("--preview", action="store_true", help="Only print the summary, import nothing")
    args = parser.parse_args(argv)

    filename = os.path.basename(args.path)
    with open(args.path, "rb") as f:
        content = f.read()

    try:
        check_upload(filename, len(content))
        if args.preview:
            summary = preview_import(content, filename, args.month)
            print(json.dumps(summary.model_dump(by_alias=True), indent=2))
            return 0

        init_db()
        db = SessionLocal()
        try:
            result = commit_import(db, content, filename, args.month, args.year)
        finally:
            db.close()
    except TaskImportError as e:
        logger.error(f"❌ {e}")
        return 1

    print(json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
