#!/usr/bin/env python3
"""
Initialize database tables and seed the service catalogue
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from opstracker.database import engine, SessionLocal, init_db
from opstracker.seed import seed_database
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Initialize database"""
    try:
        logger.info("🔧 Initializing database...")

        logger.info("📊 Creating tables...")
        init_db(engine)
        logger.info("✅ Tables created successfully")

        db = SessionLocal()
        try:
            seed_database(db)
        finally:
            db.close()

        logger.info("✅ Database initialization complete")

    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
