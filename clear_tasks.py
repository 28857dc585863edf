#!/usr/bin/env python3
"""
Delete every task and reset engineer/service counters (keeps the registry)
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from opstracker.database import SessionLocal
from opstracker.models import Task, Engineer, Service
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def clear_tasks():
    """Delete all tasks but preserve engineers and services"""
    db = SessionLocal()

    try:
        logger.info("🗑️  Deleting all tasks...")
        deleted = db.query(Task).delete()
        db.query(Engineer).update({Engineer.tasks_total: 0})
        db.query(Service).update({Service.count: 0})
        db.commit()
        logger.info(f"✅ Deleted {deleted} tasks, counters reset")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error deleting tasks: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    clear_tasks()
