# services/academics/controllers/subject_service.py
import logging

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.controllers import program_associations
from services.academics.models.activities import Activity
from services.academics.models.classes import Class
from services.academics.models.programs import Program
from services.academics.models.subjects import Subject
from services.academics.schemas.subjects import SubjectCreate
from services.scheduling.models.sessions import Session
from shared.crud import count, ensure_exists, exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import DuplicateResourceError, ValidationError

logger = logging.getLogger(__name__)


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id=None):
    stmt = select(Subject.id).where(func.lower(Subject.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Subject.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateResourceError("Subject", "name", name)


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> Subject:
    await _ensure_unique_name(db, payload.name)
    subject = Subject(name=payload.name)
    await program_associations.apply_program(db, subject, payload.program_id)
    subject = await save(db, subject)
    logger.info("Created subject %s", subject.name)
    return subject


async def update_subject(db: AsyncSession, subject_id, payload: SubjectCreate) -> Subject:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    await _ensure_unique_name(db, payload.name, exclude_id=subject_id)
    subject.name = payload.name
    # An omitted program keeps the current assignment
    if payload.program_id is not None:
        await program_associations.apply_program(db, subject, payload.program_id)
    return await save(db, subject)


async def get_subject(db: AsyncSession, subject_id) -> Subject:
    return await get_or_404(db, Subject, subject_id, "Subject")


async def delete_subject(db: AsyncSession, subject_id):
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    # Sessions cannot outlive their subject; activities just lose the link
    await db.execute(delete(Session).where(Session.subject_id == subject_id))
    await db.execute(update(Activity).where(Activity.subject_id == subject_id).values(subject_id=None))
    await db.delete(subject)
    await db.commit()
    logger.info("Deleted subject %s", subject.name)


async def list_subjects(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Subject).order_by(Subject.name), page, size)


async def list_all_subjects(db: AsyncSession):
    return await list_all(db, select(Subject).order_by(Subject.name))


async def subject_exists(db: AsyncSession, subject_id) -> bool:
    return await exists_by_id(db, Subject, subject_id)


async def find_by_class(db: AsyncSession, class_id):
    school_class = await get_or_404(db, Class, class_id, "Class")
    if school_class.program_id is None:
        return []
    stmt = select(Subject).where(Subject.program_id == school_class.program_id).order_by(Subject.name)
    return await list_all(db, stmt)


async def find_by_program(db: AsyncSession, program_id):
    await ensure_exists(db, Program, program_id, "Program")
    return await list_all(db, select(Subject).where(Subject.program_id == program_id).order_by(Subject.name))


async def count_by_program(db: AsyncSession, program_id) -> int:
    await ensure_exists(db, Program, program_id, "Program")
    return await count(db, select(Subject).where(Subject.program_id == program_id))


async def search_by_name(db: AsyncSession, term: str):
    term = (term or "").strip()
    if not term:
        raise ValidationError("Search term cannot be empty")
    stmt = select(Subject).where(func.lower(Subject.name).like(f"%{term.lower()}%")).order_by(Subject.name)
    return await list_all(db, stmt)
