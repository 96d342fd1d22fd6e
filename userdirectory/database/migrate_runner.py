"""Database migration runner for deploys.

Goal:
- Prefer Alembic migrations for deterministic schema management.
- If the users table already exists (e.g. created by `create_all()` before Alembic
  was tracking it), verify the expected columns are present and `stamp head`
  instead of failing.

Run as a one-off job: `python -m userdirectory.database.migrate_runner`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import List, Tuple

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from userdirectory.database.database import DATABASE_URL, build_engine

logger = logging.getLogger(__name__)

REQUIRED_USER_COLUMNS = ("id", "email", "first_name", "last_name", "active", "created_at", "updated_at")


def _alembic_cfg() -> Config:
    cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", DATABASE_URL)
    return cfg


def _required_schema_checks() -> List[Tuple[str, str]]:
    """Return (kind, name) checks required to safely stamp head."""
    checks = [("table", "users")]
    checks.extend(("column:users", column) for column in REQUIRED_USER_COLUMNS)
    return checks


def missing_requirements(engine: Engine) -> List[str]:
    """List schema elements absent from the database (empty = baseline present)."""
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    columns = {}
    missing: List[str] = []
    for kind, name in _required_schema_checks():
        if kind == "table":
            if name not in tables:
                missing.append(f"missing table: {name}")
        elif kind.startswith("column:"):
            table = kind.split(":", 1)[1]
            if table not in tables:
                continue
            if table not in columns:
                columns[table] = {col["name"] for col in inspector.get_columns(table)}
            if name not in columns[table]:
                missing.append(f"missing column: {table}.{name}")
        else:
            missing.append(f"unknown check: {kind} {name}")
    return missing


def main() -> int:
    engine = build_engine(DATABASE_URL)

    try:
        command.upgrade(_alembic_cfg(), "head")
        return 0
    except Exception as e:
        msg = str(e).lower()
        if not any(s in msg for s in ["duplicate", "already exists", "exists"]):
            raise

        # Only stamp head if we can verify the expected schema is present.
        missing = missing_requirements(engine)
        if missing:
            raise RuntimeError(
                "Alembic upgrade failed and schema is not at expected baseline; refusing to stamp head. "
                + "; ".join(missing)
            ) from e

        logger.warning("Schema already present without Alembic history; stamping head")
        command.stamp(_alembic_cfg(), "head")
        return 0


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    sys.exit(main())
