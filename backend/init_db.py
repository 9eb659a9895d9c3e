#!/usr/bin/env python3
# backend/init_db.py
"""
Database initialization script.

Creates every table of the reconciliation schema (interns, accounts, teams,
projects, modules, functions and their link tables) without going through
Alembic. Handy for a throwaway development database.

This script can be run from any directory:
    python backend/init_db.py
    cd backend && python init_db.py
"""
import sys
from pathlib import Path

# Add the backend directory to Python path so 'app' package is importable
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy import inspect

from app.database import engine
from app.models import Base


def init_db() -> list[str]:
    """
    Create all database tables defined in models.

    Returns:
        Names of the tables that did not exist before
    """
    existing = set(inspect(engine).get_table_names())
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    created = [name for name in Base.metadata.tables if name not in existing]
    for name in created:
        print(f"  + {name}")
    print(f"Done: {len(created)} created, {len(existing)} already present.")
    return created


if __name__ == "__main__":
    init_db()
