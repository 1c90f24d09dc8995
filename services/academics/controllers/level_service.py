# services/academics/controllers/level_service.py
import logging

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.classes import Class
from services.academics.models.departments import Department
from services.academics.models.levels import Level
from services.academics.schemas.levels import LevelCreate
from shared.crud import count, ensure_exists, exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import DuplicateResourceError, ValidationError

logger = logging.getLogger(__name__)


async def _ensure_unique_name(db: AsyncSession, name: str, department_id, exclude_id=None):
    # Unique within the department, or among department-less levels
    stmt = select(Level.id).where(func.lower(Level.name) == name.lower())
    if department_id is None:
        stmt = stmt.where(Level.department_id.is_(None))
    else:
        stmt = stmt.where(Level.department_id == department_id)
    if exclude_id is not None:
        stmt = stmt.where(Level.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateResourceError("Level", "name", name)


async def create_level(db: AsyncSession, payload: LevelCreate) -> Level:
    if payload.department_id is not None:
        await ensure_exists(db, Department, payload.department_id, "Department")
    await _ensure_unique_name(db, payload.name, payload.department_id)
    level = await save(db, Level(name=payload.name, department_id=payload.department_id))
    logger.info("Created level %s", level.name)
    return level


async def update_level(db: AsyncSession, level_id, payload: LevelCreate) -> Level:
    level = await get_or_404(db, Level, level_id, "Level")
    if payload.department_id is not None:
        await ensure_exists(db, Department, payload.department_id, "Department")
    await _ensure_unique_name(db, payload.name, payload.department_id, exclude_id=level_id)
    level.name = payload.name
    level.department_id = payload.department_id
    return await save(db, level)


async def get_level(db: AsyncSession, level_id) -> Level:
    return await get_or_404(db, Level, level_id, "Level")


async def delete_level(db: AsyncSession, level_id):
    level = await get_or_404(db, Level, level_id, "Level")
    await db.execute(update(Class).where(Class.level_id == level_id).values(level_id=None))
    await db.delete(level)
    await db.commit()
    logger.info("Deleted level %s", level.name)


async def list_levels(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Level).order_by(Level.name), page, size)


async def list_all_levels(db: AsyncSession):
    return await list_all(db, select(Level).order_by(Level.name))


async def level_exists(db: AsyncSession, level_id) -> bool:
    return await exists_by_id(db, Level, level_id)


async def find_by_department(db: AsyncSession, department_id):
    await ensure_exists(db, Department, department_id, "Department")
    return await list_all(db, select(Level).where(Level.department_id == department_id).order_by(Level.name))


async def count_by_department(db: AsyncSession, department_id) -> int:
    await ensure_exists(db, Department, department_id, "Department")
    return await count(db, select(Level).where(Level.department_id == department_id))


async def search_by_name(db: AsyncSession, term: str):
    term = (term or "").strip()
    if not term:
        raise ValidationError("Search term cannot be empty")
    stmt = select(Level).where(func.lower(Level.name).like(f"%{term.lower()}%")).order_by(Level.name)
    return await list_all(db, stmt)


async def count_classes(db: AsyncSession, level_id) -> int:
    await ensure_exists(db, Level, level_id, "Level")
    return await count(db, select(Class).where(Class.level_id == level_id))


async def hierarchy_path(db: AsyncSession, level_id) -> str:
    """``"Department > Level"``, or just the level name without a department."""
    level = await get_or_404(db, Level, level_id, "Level")
    if level.department_id is None:
        return level.name
    department = await db.get(Department, level.department_id)
    return f"{department.name} > {level.name}" if department else level.name
