"""Create the loading operations table if it does not exist yet."""

import asyncio

from loading_insights.db.connection import engine
from loading_insights.db.models import Base


async def init() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print(f"[init_db] Ensured tables: {', '.join(sorted(Base.metadata.tables))}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init())
