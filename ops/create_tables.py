"""Create (or rebuild) the Cascata tables with `Base.metadata.create_all()`.

For local SQLite databases and throwaway environments; deployed databases go
through the Alembic revisions in `migrations/versions`.

Usage
-----
$ python -m ops.create_tables
$ python -m ops.create_tables --drop      # wipe every cascade table first
"""
from __future__ import annotations

import argparse

from sqlalchemy import inspect

from app.core.db import engine, Base
from app.core import models  # noqa: F401  (registers tables on Base.metadata)


def main() -> None:
    parser = argparse.ArgumentParser(description="Create Cascata tables")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables before creating")
    args = parser.parse_args()

    existing = set(inspect(engine).get_table_names())
    with engine.begin() as conn:
        if args.drop:
            Base.metadata.drop_all(bind=conn)
            print(f"[cascata] Dropped {len(existing & set(Base.metadata.tables))} tables.")
            existing = set()
        Base.metadata.create_all(bind=conn)

    created = sorted(set(Base.metadata.tables) - existing)
    print(f"[cascata] Created: {', '.join(created) if created else 'nothing (all tables exist)'}")
    print(f"[cascata] Database: {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
