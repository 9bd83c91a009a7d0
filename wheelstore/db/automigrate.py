from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from wheelstore.app.features.products.models import Base

logger = logging.getLogger(__name__)


def apply_migrations_safely(url: str) -> None:
    """Apply Alembic migrations to the latest head.

    This is safe to run on every startup; Alembic will be a no-op when up-to-date.
    Any errors are logged but do not prevent the app from starting.
    """
    try:
        project_root = Path(__file__).resolve().parents[2]
        alembic_dir = project_root / "alembic"

        cfg = Config()
        cfg.set_main_option("script_location", str(alembic_dir))
        # Ensure the DB URL used by the app is also used for migrations
        cfg.set_main_option("sqlalchemy.url", url)

        command.upgrade(cfg, "head")
        logger.info("Alembic migrations applied (or already up-to-date)")
    except Exception as exc:
        logger.warning("Skipping Alembic auto-migration: %s", exc)


def ensure_tables_exist(engine: Engine) -> None:
    """Create any model table the database is missing. Idempotent."""
    existing = set(inspect(engine).get_table_names())
    missing = [
        table for name, table in Base.metadata.tables.items() if name not in existing
    ]
    if missing:
        logger.warning("Creating missing tables: %s", ", ".join(t.name for t in missing))
        Base.metadata.create_all(bind=engine, tables=missing)
