"""
Task endpoints
"""
import html
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional

from opstracker.database import get_db
from opstracker.models import Task, TaskStatus
from opstracker.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskBulkCreate, TaskBulkResponse
)
from opstracker.services.registry import ensure_engineers, ensure_services, refresh_counts
from opstracker.services.spreadsheet import normalize_month
from opstracker.services.errors import InvalidMonthError

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


def _sanitize_input(text: Optional[str]) -> Optional[str]:
    """Sanitize user input to prevent XSS attacks."""
    if not text:
        return text
    return html.escape(text)


def _get_live_task(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.is_deleted == False).first()  # noqa: E712
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _build_task(data: TaskCreate) -> Task:
    return Task(
        service=data.service,
        engineer=data.engineer,
        week=data.week,
        month=data.month,
        year=data.year,
        status=data.status,
        priority=data.priority,
        description=_sanitize_input(data.description),
    )


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    month: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    engineer: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
    status: Optional[TaskStatus] = Query(None),
    week: Optional[int] = Query(None, ge=1, le=4),
    db: Session = Depends(get_db)
):
    """
    List live tasks, newest first, optionally filtered.
    """
    query = db.query(Task).filter(Task.is_deleted == False)  # noqa: E712

    if month:
        try:
            query = query.filter(Task.month == normalize_month(month))
        except InvalidMonthError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if year is not None:
        query = query.filter(Task.year == year)
    if engineer:
        query = query.filter(Task.engineer == engineer)
    if service:
        query = query.filter(Task.service == service)
    if status:
        query = query.filter(Task.status == status)
    if week is not None:
        query = query.filter(Task.week == week)

    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: Session = Depends(get_db)):
    return _get_live_task(db, task_id)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(task_data: TaskCreate, db: Session = Depends(get_db)):
    """
    Create a task. Unknown engineers and services are registered on the fly.
    """
    task = _build_task(task_data)
    ensure_engineers(db, [task.engineer])
    ensure_services(db, [task.service])
    db.add(task)
    refresh_counts(db, [task.engineer], [task.service])
    db.commit()
    db.refresh(task)

    logger.info(f"✅ Created task {task.id} for {task.engineer} ({task.service}, {task.month} week {task.week})")
    return task


@router.post("/bulk", response_model=TaskBulkResponse, status_code=201)
async def create_tasks_bulk(payload: TaskBulkCreate, db: Session = Depends(get_db)):
    """
    Create several tasks in one transaction; nothing is created if any insert fails.
    """
    tasks = [_build_task(item) for item in payload.tasks]
    engineers = {t.engineer for t in tasks}
    services = {t.service for t in tasks}

    try:
        ensure_engineers(db, engineers)
        ensure_services(db, services)
        db.add_all(tasks)
        refresh_counts(db, engineers, services)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Bulk create failed: {e}")
        raise HTTPException(status_code=500, detail=f"Bulk create failed: {str(e)}")

    for task in tasks:
        db.refresh(task)

    logger.info(f"✅ Created {len(tasks)} tasks in bulk")
    return {"count": len(tasks), "tasks": tasks}


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: int, task_data: TaskUpdate, db: Session = Depends(get_db)):
    """
    Update the supplied fields of a task.
    """
    task = _get_live_task(db, task_id)
    old_engineer, old_service = task.engineer, task.service

    changes = task_data.model_dump(exclude_unset=True)
    for field_name in ("service", "engineer"):
        if field_name in changes:
            value = (changes[field_name] or "").strip()
            if not value:
                raise HTTPException(status_code=400, detail=f"{field_name} must not be blank")
            changes[field_name] = value
    for field_name in ("week", "month", "year", "status", "priority"):
        if field_name in changes and changes[field_name] is None:
            raise HTTPException(status_code=400, detail=f"{field_name} must not be null")
    if "description" in changes:
        changes["description"] = _sanitize_input(changes["description"])

    for field_name, value in changes.items():
        setattr(task, field_name, value)
    task.updated_at = datetime.utcnow()

    ensure_engineers(db, [task.engineer])
    ensure_services(db, [task.service])
    refresh_counts(db, {old_engineer, task.engineer}, {old_service, task.service})
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
async def delete_task(task_id: int, db: Session = Depends(get_db)):
    """
    Soft-delete a task; it disappears from listings and counters.
    """
    task = _get_live_task(db, task_id)
    task.is_deleted = True
    task.deleted_at = datetime.utcnow()
    refresh_counts(db, [task.engineer], [task.service])
    db.commit()

    logger.info(f"🗑️ Deleted task {task_id}")
    return {"message": "Task deleted successfully"}
