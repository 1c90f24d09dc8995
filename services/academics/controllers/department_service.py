# services/academics/controllers/department_service.py
import logging

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.departments import Department
from services.academics.models.levels import Level
from services.academics.schemas.departments import DepartmentCreate
from shared.crud import exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import DuplicateResourceError, NotFoundError

logger = logging.getLogger(__name__)


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id=None):
    stmt = select(Department.id).where(func.lower(Department.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Department.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateResourceError("Department", "name", name)


async def create_department(db: AsyncSession, payload: DepartmentCreate) -> Department:
    await _ensure_unique_name(db, payload.name)
    department = await save(db, Department(name=payload.name))
    logger.info("Created department %s", department.name)
    return department


async def update_department(db: AsyncSession, department_id, payload: DepartmentCreate) -> Department:
    department = await get_or_404(db, Department, department_id, "Department")
    await _ensure_unique_name(db, payload.name, exclude_id=department_id)
    department.name = payload.name
    return await save(db, department)


async def get_department(db: AsyncSession, department_id) -> Department:
    return await get_or_404(db, Department, department_id, "Department")


async def find_by_name(db: AsyncSession, name: str) -> Department:
    result = await db.execute(select(Department).where(func.lower(Department.name) == name.strip().lower()))
    department = result.scalars().first()
    if department is None:
        raise NotFoundError("Department", "name", name)
    return department


async def delete_department(db: AsyncSession, department_id):
    department = await get_or_404(db, Department, department_id, "Department")
    await db.execute(update(Level).where(Level.department_id == department_id).values(department_id=None))
    await db.delete(department)
    await db.commit()
    logger.info("Deleted department %s", department.name)


async def list_departments(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Department).order_by(Department.name), page, size)


async def list_all_departments(db: AsyncSession):
    return await list_all(db, select(Department).order_by(Department.name))


async def department_exists(db: AsyncSession, department_id) -> bool:
    return await exists_by_id(db, Department, department_id)
