"""
Create the tables (and, on PostgreSQL, the spatial functions).

Usage: python create_schema.py (from the backend dir). Exits non-zero when a
local SQLite file holds a stale table that lacks columns the models expect.
"""

import asyncio
import logging
import sys
from typing import List, Tuple

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import get_settings
from core.database import dispose_database, get_database_manager, init_database
from models.base import Base
import models  # noqa: F401
from repositories.spatial import POSTGIS_FUNCTIONS

logger = logging.getLogger(__name__)


def _is_sqlite_file_url(url: str) -> bool:
    if not url or "sqlite" not in url.lower():
        return False
    if ":memory:" in url:
        return False
    return True


def find_missing_columns(conn: Connection) -> List[Tuple[str, List[str]]]:
    """(table, missing columns) for existing tables that are older than the models."""
    inspector = inspect(conn)
    stale = []
    for name, table in Base.metadata.tables.items():
        if not inspector.has_table(name):
            continue
        current = {c["name"] for c in inspector.get_columns(name)}
        missing = sorted(set(table.columns.keys()) - current)
        if missing:
            stale.append((name, missing))
    return stale


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        if conn.dialect.name == "postgresql":
            for statement in POSTGIS_FUNCTIONS:
                await conn.execute(text(statement))
            logger.info("PostGIS radius functions installed")


async def main() -> int:
    settings = get_settings()
    await init_database(settings.database_url)
    engine = get_database_manager().engine

    if _is_sqlite_file_url(settings.database_url):
        async with engine.connect() as conn:
            stale = await conn.run_sync(find_missing_columns)
        if stale:
            for table, missing in stale:
                print(f"Schema mismatch: table {table!r} is missing column(s) {missing}", file=sys.stderr)
            print("Delete the local database file and run this script again.", file=sys.stderr)
            await dispose_database()
            return 1

    await create_schema(engine)
    await dispose_database()
    print("schema ok")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
