"""
OpsTracker Test Configuration

This module provides fixtures and configuration for the entire test suite:
- Test database isolation (fresh in-memory SQLite schema per test)
- Test FastAPI client wired to the test session
- Workbook builders for import tests

All tests use these fixtures to ensure:
1. Complete isolation from any real database
2. Clean state between tests via create_all/drop_all
"""

import os
from io import BytesIO
from typing import Dict, Generator, List, Any

import pytest
from openpyxl import Workbook
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_ON_STARTUP"] = "false"

# Import after setting environment
from opstracker.database import Base, engine, get_db, init_db
from opstracker.main import app
from opstracker.models import Task, TaskStatus, TaskPriority


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SCENARIO_HEADER = ["Task", "Engineer", "Service", "Week", "Status"]
SCENARIO_ROWS = [
    ["Fix firewall", "Ali", "VPN", 2, "pending"],
    ["", "Sara", "SOC", 1, ""],
    ["Review", "", "SOC", 3, "done"],
    ["Patch", "Omar", "FCR", "Week 4", "in progress"],
    ["Audit", "Lina", "FCR", 1, "Completed"],
]


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def test_engine():
    """
    The application engine, bound to a shared in-memory SQLite database.
    """
    yield engine


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """
    Provide a database session on a freshly created schema.

    Tables are dropped after each test so nothing leaks between tests.
    """
    init_db(test_engine)
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def test_client(db_session) -> Generator[TestClient, None, None]:
    """
    Provide a FastAPI test client configured with the test database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Workbook Fixtures
# ============================================================================

def build_workbook(sheets: Dict[str, List[List[Any]]]) -> bytes:
    """Write {sheet name: rows} into an .xlsx file and return its bytes."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


@pytest.fixture
def make_workbook():
    """Builder fixture: make_workbook({"MAR": rows}) -> xlsx bytes."""
    return build_workbook


@pytest.fixture
def scenario_workbook() -> bytes:
    """The five-row weekly sheet used throughout the import tests."""
    return build_workbook({"MAR": [SCENARIO_HEADER] + SCENARIO_ROWS})


@pytest.fixture
def sample_tasks(db_session) -> dict:
    """Create a few live tasks for March 2025."""
    task1 = Task(
        service="VPN", engineer="Ali", week=1, month="March", year=2025,
        status=TaskStatus.COMPLETED, priority=TaskPriority.MEDIUM, description="Renew certificates"
    )
    task2 = Task(
        service="SOC Alerts", engineer="Sara", week=2, month="March", year=2025,
        status=TaskStatus.PENDING, priority=TaskPriority.HIGH
    )
    task3 = Task(
        service="VPN", engineer="Omar", week=3, month="April", year=2025,
        status=TaskStatus.IN_PROGRESS, priority=TaskPriority.LOW
    )
    db_session.add_all([task1, task2, task3])
    db_session.commit()

    return {"task1": task1, "task2": task2, "task3": task3}


# ============================================================================
# Helper Functions
# ============================================================================

def count_tasks(db_session) -> int:
    """Helper to count every persisted task row."""
    return db_session.query(Task).count()
