"""
Pydantic schemas for API requests and responses
"""
from pydantic import BaseModel, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import datetime

from opstracker.models import TaskStatus, TaskPriority, ServiceCategory
from opstracker.services.spreadsheet import normalize_month


class CamelModel(BaseModel):
    """Base for the import contract: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Task schemas
class TaskCreate(BaseModel):
    service: str = Field(..., min_length=1)
    engineer: str = Field(..., min_length=1)
    week: int = Field(..., ge=1, le=4)
    month: str
    year: int = Field(..., ge=2000, le=2100)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None

    @field_validator("service", "engineer")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("month")
    @classmethod
    def _month_name(cls, value: str) -> str:
        return normalize_month(value)


class TaskUpdate(BaseModel):
    service: Optional[str] = None
    engineer: Optional[str] = None
    week: Optional[int] = Field(default=None, ge=1, le=4)
    month: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    description: Optional[str] = None

    @field_validator("month")
    @classmethod
    def _month_name(cls, value: Optional[str]) -> Optional[str]:
        return normalize_month(value) if value is not None else None


class TaskBulkCreate(BaseModel):
    tasks: List[TaskCreate] = Field(..., min_length=1)


class TaskResponse(BaseModel):
    id: int
    service: str
    engineer: str
    week: int
    month: str
    year: int
    status: TaskStatus
    priority: TaskPriority
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskBulkResponse(BaseModel):
    count: int
    tasks: List[TaskResponse]


# Registry schemas
class EngineerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: Optional[str] = None


class EngineerResponse(BaseModel):
    id: int
    name: str
    color: Optional[str] = None
    tasks_total: int

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: ServiceCategory = ServiceCategory.PRIMARY
    assigned_to: Optional[str] = None


class ServiceResponse(BaseModel):
    id: int
    name: str
    category: ServiceCategory
    assigned_to: Optional[str] = None
    count: int

    class Config:
        from_attributes = True


# Import schemas
class PreviewSummary(CamelModel):
    sheet_name: str
    header_row: int
    total_rows: int
    valid_rows: int
    invalid_rows: int
    engineers: List[str]
    services: List[str]
    status_counts: Dict[str, int]
    column_map: Dict[str, int]


class ImportBatch(CamelModel):
    """Descriptor of one committed import; the caller hands it back to undo."""
    task_ids: List[int]
    count: int
    month: str
    year: int
    timestamp: datetime


class CommitResult(CamelModel):
    imported: int
    skipped: int
    month: str
    year: int
    task_ids: List[int]
    batch: ImportBatch


class UndoRequest(CamelModel):
    task_ids: List[StrictInt]


class UndoResult(CamelModel):
    deleted: int
