"""
startup.py — Database Startup Sync (Idempotent)

Tables and indexes are defined in the ORM models and created via
Base.metadata.create_all(checkfirst=True). Alembic owns schema changes
after the baseline; this only makes a fresh database usable on first boot.

Called by: main.py lifespan
Depends on: database.py (engine), models (Base)
"""

import logging
import os

from .database import engine

log = logging.getLogger("outreach.startup")


def run_startup_migrations() -> None:
    """Create any missing tables. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode, skipping startup schema sync")
        return

    from .models import Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")
