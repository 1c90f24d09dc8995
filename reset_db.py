# reset_db.py
import asyncio
import logging

from shared.db import engine, Base
from shared.logging_setup import setup_logging

import services.user_management.models
import services.academics.models
import services.student_records.models
import services.scheduling.models

logger = logging.getLogger(__name__)


async def reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Database reset: all tables dropped and recreated")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(reset_db())
