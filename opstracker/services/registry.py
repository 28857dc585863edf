"""
Engineer/service registry upkeep shared by the task endpoints and imports.

None of these helpers commit; callers own the transaction.
"""

import logging
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from opstracker.models import Engineer, Service, ServiceCategory, Task

logger = logging.getLogger(__name__)

ENGINEER_COLORS = [
    "#3b82f6", "#8b5cf6", "#ec4899", "#f59e0b", "#10b981", "#ef4444", "#06b6d4",
    "#84cc16", "#f97316", "#6366f1", "#14b8a6", "#a855f7", "#eab308",
]


def ensure_engineers(db: Session, names: Iterable[str]) -> int:
    """Register engineers that don't exist yet. Returns how many were added."""
    wanted = sorted({name for name in names if name})
    if not wanted:
        return 0
    existing = {
        name for (name,) in db.query(Engineer.name).filter(Engineer.name.in_(wanted)).all()
    }
    offset = db.query(func.count(Engineer.id)).scalar() or 0
    added = 0
    for name in wanted:
        if name in existing:
            continue
        color = ENGINEER_COLORS[(offset + added) % len(ENGINEER_COLORS)]
        db.add(Engineer(name=name, color=color, tasks_total=0))
        added += 1
    if added:
        db.flush()
        logger.info(f"👷 Registered {added} new engineer(s)")
    return added


def ensure_services(db: Session, names: Iterable[str]) -> int:
    """Register services that don't exist yet (as primary). Returns how many were added."""
    wanted = sorted({name for name in names if name})
    if not wanted:
        return 0
    existing = {
        name for (name,) in db.query(Service.name).filter(Service.name.in_(wanted)).all()
    }
    added = 0
    for name in wanted:
        if name not in existing:
            db.add(Service(name=name, category=ServiceCategory.PRIMARY, count=0))
            added += 1
    if added:
        db.flush()
        logger.info(f"🛡️ Registered {added} new service(s)")
    return added


def refresh_counts(db: Session, engineers: Iterable[str] = (), services: Iterable[str] = ()) -> None:
    """Recompute live task counters for the given engineers and services."""
    db.flush()
    for name in {e for e in engineers if e}:
        total = db.query(func.count(Task.id)).filter(
            Task.engineer == name,
            Task.is_deleted == False  # noqa: E712
        ).scalar()
        db.query(Engineer).filter(Engineer.name == name).update(
            {Engineer.tasks_total: total}, synchronize_session=False
        )
    for name in {s for s in services if s}:
        total = db.query(func.count(Task.id)).filter(
            Task.service == name,
            Task.is_deleted == False  # noqa: E712
        ).scalar()
        db.query(Service).filter(Service.name == name).update(
            {Service.count: total}, synchronize_session=False
        )
