"""Script to initialize the database."""

import asyncio

from app.database import engine
from app.models import all_metadata


async def init_db() -> None:
    """Create every table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(all_metadata().create_all)

    await engine.dispose()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())
