"""
Main FastAPI application for OpsTracker - weekly task tracking for security operations
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from opstracker.config import settings
from opstracker.database import init_db, SessionLocal
from opstracker.seed import seed_database
from opstracker.routers import registry, task_import, tasks

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown events for the application.
    """
    logger.info("Initializing database...")
    init_db()

    if settings.seed_on_startup:
        logger.info("Seeding service catalogue...")
        db = SessionLocal()
        try:
            seed_database(db)
            logger.info("Database initialization complete")
        finally:
            db.close()

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="OpsTracker",
    description="Backend API for weekly security operations task tracking and spreadsheet import",
    version="1.0.0",
    lifespan=lifespan
)


# Include routers
app.include_router(tasks.router)
app.include_router(registry.engineers_router)
app.include_router(registry.services_router)
app.include_router(task_import.router)  # Spreadsheet import/export


@app.get("/")
async def root():
    return {
        "status": "ok",
        "service": "OpsTracker",
        "version": "1.0.0",
        "documentation": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint
    """
    return {"status": "healthy"}
