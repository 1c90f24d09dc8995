# services/academics/controllers/class_service.py
import logging

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.controllers import program_associations
from services.academics.models.classes import Class
from services.academics.models.departments import Department
from services.academics.models.levels import Level
from services.academics.models.programs import Program
from services.academics.models.subjects import Subject
from services.academics.schemas.classes import ClassCreate
from services.user_management.models.users import User, Role
from shared.crud import count, ensure_exists, exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import DuplicateResourceError

logger = logging.getLogger(__name__)


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id=None):
    stmt = select(Class.id).where(func.lower(Class.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Class.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateResourceError("Class", "name", name)


async def create_class(db: AsyncSession, payload: ClassCreate) -> Class:
    await _ensure_unique_name(db, payload.name)
    if payload.level_id is not None:
        await ensure_exists(db, Level, payload.level_id, "Level")
    school_class = Class(name=payload.name, level_id=payload.level_id)
    await program_associations.apply_program(db, school_class, payload.program_id)
    school_class = await save(db, school_class)
    logger.info("Created class %s", school_class.name)
    return school_class


async def update_class(db: AsyncSession, class_id, payload: ClassCreate) -> Class:
    school_class = await get_or_404(db, Class, class_id, "Class")
    await _ensure_unique_name(db, payload.name, exclude_id=class_id)
    if payload.level_id is not None:
        await ensure_exists(db, Level, payload.level_id, "Level")
    school_class.name = payload.name
    school_class.level_id = payload.level_id
    # An omitted program keeps the current assignment
    if payload.program_id is not None:
        await program_associations.apply_program(db, school_class, payload.program_id)
    return await save(db, school_class)


async def get_class(db: AsyncSession, class_id) -> Class:
    return await get_or_404(db, Class, class_id, "Class")


async def delete_class(db: AsyncSession, class_id):
    school_class = await get_or_404(db, Class, class_id, "Class")
    await db.execute(update(User).where(User.class_id == class_id).values(class_id=None))
    await db.delete(school_class)
    await db.commit()
    logger.info("Deleted class %s", school_class.name)


async def list_classes(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Class).order_by(Class.name), page, size)


async def list_all_classes(db: AsyncSession):
    return await list_all(db, select(Class).order_by(Class.name))


async def class_exists(db: AsyncSession, class_id) -> bool:
    return await exists_by_id(db, Class, class_id)


async def find_by_level(db: AsyncSession, level_id):
    await ensure_exists(db, Level, level_id, "Level")
    return await list_all(db, select(Class).where(Class.level_id == level_id).order_by(Class.name))


async def find_by_department(db: AsyncSession, department_id):
    await ensure_exists(db, Department, department_id, "Department")
    stmt = (
        select(Class)
        .join(Level, Class.level_id == Level.id)
        .where(Level.department_id == department_id)
        .order_by(Class.name)
    )
    return await list_all(db, stmt)


async def find_by_program(db: AsyncSession, program_id):
    await ensure_exists(db, Program, program_id, "Program")
    return await list_all(db, select(Class).where(Class.program_id == program_id).order_by(Class.name))


async def find_by_subject(db: AsyncSession, subject_id):
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    if subject.program_id is None:
        return []
    return await list_all(db, select(Class).where(Class.program_id == subject.program_id).order_by(Class.name))


async def count_by_level(db: AsyncSession, level_id) -> int:
    await ensure_exists(db, Level, level_id, "Level")
    return await count(db, select(Class).where(Class.level_id == level_id))


async def count_by_program(db: AsyncSession, program_id) -> int:
    await ensure_exists(db, Program, program_id, "Program")
    return await count(db, select(Class).where(Class.program_id == program_id))


async def count_students(db: AsyncSession, class_id) -> int:
    await ensure_exists(db, Class, class_id, "Class")
    return await count(db, select(User).where(User.class_id == class_id, User.role == Role.STUDENT))


async def list_students(db: AsyncSession, class_id):
    await ensure_exists(db, Class, class_id, "Class")
    stmt = (
        select(User)
        .where(User.class_id == class_id, User.role == Role.STUDENT)
        .order_by(User.last_name, User.first_name)
    )
    return await list_all(db, stmt)
