"""Create the four record tables on a fresh database: python -m app.db.init_db"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import app.core.models  # noqa: F401  (registers tables on Base.metadata)
from app.core.app_logger import get_logger, setup_logging
from app.db.session import Base, engine

logger = get_logger(__name__)


async def create_tables(target: AsyncEngine = engine) -> None:
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def _main() -> None:
    setup_logging()
    try:
        await create_tables()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(_main())
