# create_db.py
import asyncio
import logging

from sqlalchemy.future import select

from shared.config import BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_PASSWORD, BOOTSTRAP_ADMIN_USERNAME
from shared.db import AsyncSessionLocal, engine, Base
from shared.auth import get_password_hash
from shared.logging_setup import setup_logging

# Import all models here so they are registered with SQLAlchemy's metadata
import services.user_management.models
import services.academics.models
import services.student_records.models
import services.scheduling.models
from services.user_management.models.users import User, Role

logger = logging.getLogger(__name__)


async def init_models():
    async with engine.begin() as conn:
        logger.info("Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created.")


async def seed_admin():
    """Create the first administrator from BOOTSTRAP_ADMIN_* when none exists."""
    if not (BOOTSTRAP_ADMIN_USERNAME and BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD):
        logger.info("No bootstrap administrator configured")
        return

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User.id).where(User.role == Role.ADMINISTRATOR))
        if result.first() is not None:
            logger.info("An administrator already exists, skipping bootstrap")
            return
        db.add(User(
            username=BOOTSTRAP_ADMIN_USERNAME,
            first_name="System",
            last_name="Administrator",
            email=BOOTSTRAP_ADMIN_EMAIL,
            hashed_password=get_password_hash(BOOTSTRAP_ADMIN_PASSWORD),
            role=Role.ADMINISTRATOR,
        ))
        await db.commit()
        logger.info("Bootstrap administrator %s created", BOOTSTRAP_ADMIN_USERNAME)


async def main():
    await init_models()
    await seed_admin()
    await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
