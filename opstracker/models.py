from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Boolean, Integer, DateTime,
    Enum as SQLEnum, Index, CheckConstraint
)
import enum

from opstracker.database import Base


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ServiceCategory(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Task(Base):
    """
    One unit of tracked work for an engineer on a service in a given week.

    Weeks are numbered 1-4 within a month. Tasks are soft-deleted through
    the API (is_deleted) and hard-deleted only when an import is undone.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service = Column(String, nullable=False)
    engineer = Column(String, nullable=False)
    week = Column(Integer, nullable=False)
    month = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(
        SQLEnum(TaskStatus, name="task_status", values_callable=_enum_values),
        nullable=False,
        default=TaskStatus.PENDING
    )
    priority = Column(
        SQLEnum(TaskPriority, name="task_priority", values_callable=_enum_values),
        nullable=False,
        default=TaskPriority.MEDIUM
    )
    description = Column(Text, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("week >= 1 AND week <= 4", name="ck_tasks_week_range"),
        Index("idx_tasks_engineer", "engineer"),
        Index("idx_tasks_month_year", "month", "year"),
        Index("idx_tasks_service", "service"),
    )


class Engineer(Base):
    __tablename__ = "engineers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    color = Column(String, nullable=True)  # Hex colour used by dashboards
    tasks_total = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    category = Column(
        SQLEnum(ServiceCategory, name="service_category", values_callable=_enum_values),
        nullable=False,
        default=ServiceCategory.PRIMARY
    )
    assigned_to = Column(String, nullable=True)  # Engineer name responsible for the service
    count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
