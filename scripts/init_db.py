"""
Create the customers table for local development (SQL store backend only).

The hosted store owns its schema in production; this only bootstraps a
fresh SQLite or Postgres database so the app has something to talk to.

Usage:
    python scripts/init_db.py
"""

import os
import sys
from pathlib import Path

from sqlalchemy import create_engine

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.measurebook.models import Base  # noqa: E402


def create_tables(*, database_url: str | None = None) -> None:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///measurebook.db").strip()
    engine = create_engine(db_url, future=True)
    Base.metadata.create_all(bind=engine)
    engine.dispose()


def main() -> None:
    from dotenv import load_dotenv

    load_dotenv()
    if (os.environ.get("STORE_BACKEND") or "sql").strip().lower() == "rest":
        print("STORE_BACKEND=rest: the hosted store owns the schema; nothing to do.", flush=True)
        return
    create_tables()
    print("Customers table ready.", flush=True)


if __name__ == "__main__":
    main()
