"""
Spreadsheet import endpoints: preview, commit, undo, template and export
"""

from fastapi import APIRouter, Depends, UploadFile, File, Form, Query, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from opstracker.database import get_db
from opstracker.schemas import CommitResult, PreviewSummary, UndoRequest, UndoResult
from opstracker.services.errors import FileTooLargeError, TaskImportError
from opstracker.services.spreadsheet import check_upload
from opstracker.services.task_import import (
    commit_import,
    export_tasks,
    export_template,
    preview_import,
    undo_import
)

router = APIRouter(prefix="/import", tags=["import"])
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def _read_upload(file: UploadFile) -> bytes:
    contents = await file.read()
    try:
        check_upload(file.filename or "", len(contents))
    except FileTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except TaskImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return contents


@router.post("/preview", response_model=PreviewSummary)
async def preview(
    file: UploadFile = File(...),
    month: Optional[str] = Form(None)
):
    """
    Analyse an uploaded workbook without importing anything.
    """
    logger.info(f"🔍 Import preview requested, file: {file.filename}, month: {month}")
    contents = await _read_upload(file)

    try:
        return preview_import(contents, file.filename or "", month)
    except TaskImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Preview error: {e}")
        raise HTTPException(status_code=500, detail=f"Preview failed: {str(e)}")


@router.post("/commit", response_model=CommitResult)
async def commit(
    file: UploadFile = File(...),
    month: str = Form(...),
    year: int = Form(..., ge=2000, le=2100),
    db: Session = Depends(get_db)
):
    """
    Import every valid row as a task for the given month/year.
    Keep the returned taskIds (or batch) to undo this import.
    """
    logger.info(f"📥 Import requested, file: {file.filename}, into {month} {year}")
    contents = await _read_upload(file)

    try:
        return commit_import(db, contents, file.filename or "", month, year)
    except TaskImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Import error: {e}")
        raise HTTPException(status_code=500, detail=f"Import failed: {str(e)}")


@router.post("/undo", response_model=UndoResult)
async def undo(
    request: UndoRequest,
    db: Session = Depends(get_db)
):
    """
    Delete the tasks created by an import. Unknown ids are ignored.
    """
    logger.info(f"↩️ Undo import requested for {len(request.task_ids)} task(s)")

    try:
        return undo_import(db, request.task_ids)
    except TaskImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Undo import error: {e}")
        raise HTTPException(status_code=500, detail=f"Undo import failed: {str(e)}")


@router.get("/template")
async def template():
    """
    Download an empty import workbook with example rows
    """
    return StreamingResponse(
        export_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=task_import_template.xlsx"}
    )


@router.get("/export")
async def export(
    month: str = Query(...),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db)
):
    """
    Download one month's tasks as a workbook
    """
    try:
        excel_file = export_tasks(db, month, year)
    except TaskImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Export error: {e}")
        raise HTTPException(status_code=500, detail=f"Export failed: {str(e)}")

    filename = f"tasks_{month.lower()}_{year}.xlsx"
    return StreamingResponse(
        excel_file,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
