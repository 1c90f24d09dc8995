# services/academics/controllers/program_associations.py
"""Every change to the Program / Class / Subject association lives here.

A Program groups many classes and many subjects; each class and each subject
belongs to at most one program through its own ``program_id`` column. Nothing
else writes ``program_id``: the entity services call ``apply_program`` while
staging a create or update, and everything else commits exactly once.
"""
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.classes import Class
from services.academics.models.programs import Program
from services.academics.models.subjects import Subject
from shared.crud import count, get_or_404
from shared.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def apply_program(db: AsyncSession, entity, program_id) -> None:
    """Point ``entity`` at ``program_id`` without committing (``None`` detaches)."""
    if program_id is not None:
        await get_or_404(db, Program, program_id, "Program")
    entity.program_id = program_id


async def _is_empty(db: AsyncSession, program_id) -> bool:
    classes = await count(db, select(Class).where(Class.program_id == program_id))
    subjects = await count(db, select(Subject).where(Subject.program_id == program_id))
    return classes == 0 and subjects == 0


async def _delete_if_empty(db: AsyncSession, program_id) -> bool:
    if program_id is None:
        return False
    await db.flush()
    if not await _is_empty(db, program_id):
        return False
    program = await db.get(Program, program_id)
    if program is not None:
        await db.delete(program)
        logger.info("Deleted empty program %s", program_id)
    return True


async def assign_class(db: AsyncSession, class_id, program_id) -> Class:
    school_class = await get_or_404(db, Class, class_id, "Class")
    await apply_program(db, school_class, program_id)
    await db.commit()
    await db.refresh(school_class)
    logger.info("Class %s assigned to program %s", school_class.name, program_id)
    return school_class


async def detach_class(db: AsyncSession, class_id) -> Class:
    school_class = await get_or_404(db, Class, class_id, "Class")
    school_class.program_id = None
    await db.commit()
    await db.refresh(school_class)
    return school_class


async def assign_subject(db: AsyncSession, subject_id, program_id) -> Subject:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    await apply_program(db, subject, program_id)
    await db.commit()
    await db.refresh(subject)
    logger.info("Subject %s assigned to program %s", subject.name, program_id)
    return subject


async def detach_subject(db: AsyncSession, subject_id) -> Subject:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    subject.program_id = None
    await db.commit()
    await db.refresh(subject)
    return subject


async def link_subject_to_class(db: AsyncSession, class_id, subject_id, description: Optional[str] = None) -> Program:
    """Put a class and a subject in the same program.

    The class's program wins, then the subject's; when neither has one a new
    program is created from ``description`` (or a name built from both).
    """
    school_class = await get_or_404(db, Class, class_id, "Class")
    subject = await get_or_404(db, Subject, subject_id, "Subject")

    program_id = school_class.program_id or subject.program_id
    if program_id is None:
        program = Program(description=(description or "").strip() or f"{school_class.name} - {subject.name}")
        db.add(program)
        await db.flush()
        program_id = program.id
        logger.info("Created program '%s' for class %s", program.description, school_class.name)

    previous_subject_program = subject.program_id
    school_class.program_id = program_id
    subject.program_id = program_id
    if previous_subject_program not in (None, program_id):
        await _delete_if_empty(db, previous_subject_program)

    await db.commit()
    return await get_or_404(db, Program, program_id, "Program")


async def unlink_subject_from_class(db: AsyncSession, class_id, subject_id) -> None:
    school_class = await get_or_404(db, Class, class_id, "Class")
    subject = await get_or_404(db, Subject, subject_id, "Subject")

    program_id = school_class.program_id
    if program_id is None or subject.program_id != program_id:
        raise ValidationError(f"Subject {subject.name} is not linked to class {school_class.name}")

    subject.program_id = None
    await db.flush()
    remaining = await count(db, select(Subject).where(Subject.program_id == program_id))
    if remaining == 0:
        school_class.program_id = None
    await _delete_if_empty(db, program_id)
    await db.commit()


async def find_by_class_and_subject(db: AsyncSession, class_id, subject_id) -> Program:
    result = await db.execute(
        select(Program)
        .join(Class, Class.program_id == Program.id)
        .join(Subject, Subject.program_id == Program.id)
        .where(Class.id == class_id, Subject.id == subject_id)
    )
    program = result.scalars().first()
    if program is None:
        raise NotFoundError("Program", "class and subject", f"{class_id}, {subject_id}")
    return program


async def exists_by_class_and_subject(db: AsyncSession, class_id, subject_id) -> bool:
    try:
        await find_by_class_and_subject(db, class_id, subject_id)
    except NotFoundError:
        return False
    return True


async def count_programs_by_class(db: AsyncSession, class_id) -> int:
    school_class = await get_or_404(db, Class, class_id, "Class")
    return 0 if school_class.program_id is None else 1


async def count_programs_by_subject(db: AsyncSession, subject_id) -> int:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    return 0 if subject.program_id is None else 1


async def class_program_statistics(db: AsyncSession, class_id) -> dict:
    school_class = await get_or_404(db, Class, class_id, "Class")
    program = None
    subjects = []
    if school_class.program_id is not None:
        program = await db.get(Program, school_class.program_id)
        result = await db.execute(
            select(Subject.name).where(Subject.program_id == school_class.program_id).order_by(Subject.name)
        )
        subjects = list(result.scalars().all())
    return {
        "class_id": school_class.id,
        "class_name": school_class.name,
        "program_id": program.id if program else None,
        "program_description": program.description if program else None,
        "subject_count": len(subjects),
        "subjects": subjects,
    }


async def subject_program_statistics(db: AsyncSession, subject_id) -> dict:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    program = None
    classes = []
    if subject.program_id is not None:
        program = await db.get(Program, subject.program_id)
        result = await db.execute(
            select(Class.name).where(Class.program_id == subject.program_id).order_by(Class.name)
        )
        classes = list(result.scalars().all())
    return {
        "subject_id": subject.id,
        "subject_name": subject.name,
        "program_id": program.id if program else None,
        "program_description": program.description if program else None,
        "class_count": len(classes),
        "classes": classes,
    }


async def remove_class_from_program(db: AsyncSession, class_id) -> None:
    school_class = await get_or_404(db, Class, class_id, "Class")
    program_id = school_class.program_id
    if program_id is None:
        raise ValidationError(f"Class {school_class.name} is not part of a program")
    school_class.program_id = None
    await _delete_if_empty(db, program_id)
    await db.commit()


async def remove_subject_from_program(db: AsyncSession, subject_id) -> None:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    program_id = subject.program_id
    if program_id is None:
        raise ValidationError(f"Subject {subject.name} is not part of a program")
    subject.program_id = None
    await _delete_if_empty(db, program_id)
    await db.commit()


async def delete_program(db: AsyncSession, program_id) -> None:
    program = await get_or_404(db, Program, program_id, "Program")
    await db.execute(update(Class).where(Class.program_id == program_id).values(program_id=None))
    await db.execute(update(Subject).where(Subject.program_id == program_id).values(program_id=None))
    await db.delete(program)
    await db.commit()
    logger.info("Deleted program %s", program_id)
