"""CLI entry: insert sample data. Usage: python -m seed (from backend dir)."""
from __future__ import annotations

import asyncio
import sys

from core.config import get_settings
from core.database import dispose_database, get_database_manager, init_database
from create_schema import create_schema
from seed.sample_data import seed_sample


async def _main() -> int:
    settings = get_settings()
    await init_database(settings.database_url)
    manager = get_database_manager()
    await create_schema(manager.engine)
    async with manager.session() as session:
        counts = await seed_sample(session)
    await dispose_database()
    print("Seed complete:", counts)
    return 0


def main() -> None:
    exit_code = asyncio.run(_main())
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
