from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from opstracker.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """
    Create the SQLAlchemy engine for a database URL.

    PostgreSQL URLs are switched to the psycopg (v3) driver and get a tuned
    connection pool. SQLite URLs (local runs and tests) share one connection
    so an in-memory database survives across sessions.
    """
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    engine = create_engine(
        database_url,

        # Connection Pool Settings
        pool_size=5,              # Keep 5 connections open
        max_overflow=10,          # Allow up to 10 extra connections during spikes
        pool_timeout=30,          # Wait max 30 seconds for a connection
        pool_recycle=1800,        # Recycle connections every 30 minutes
        pool_pre_ping=True,       # Check if connection is alive before using

        echo=False,               # Don't log every SQL query (set to True for debugging)

        # Connection Arguments (psycopg-specific)
        connect_args={
            "connect_timeout": 10,
            "keepalives": 1,
            "keepalives_idle": 30,
            "keepalives_interval": 10,
            "keepalives_count": 5,
        }
    )
    logger.info("Database engine initialized with connection pooling: pool_size=5, max_overflow=10")
    return engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables"""
    from opstracker.models import Task, Engineer, Service  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
