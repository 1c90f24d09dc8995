# services/student_records/controllers/absence_service.py
import logging
from datetime import date
from typing import Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.classes import Class
from services.student_records.models.absences import Absence, AbsenceStatus
from services.student_records.schemas.absences import AbsenceCreate
from services.user_management.controllers.user_service import get_user_with_role
from services.user_management.models.users import User, Role
from shared.crud import count, ensure_exists, exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import ValidationError

logger = logging.getLogger(__name__)

TOP_ABSENT_LIMIT = 5


def _check_justification(justified: bool, justification: Optional[str]):
    if justified and not (justification or "").strip():
        raise ValidationError("A justified absence requires a justification")


async def create_absence(db: AsyncSession, payload: AbsenceCreate) -> Absence:
    await get_user_with_role(db, payload.student_id, Role.STUDENT)
    _check_justification(payload.justified, payload.justification)
    absence = await save(db, Absence(**payload.model_dump()))
    logger.info("Recorded absence on %s for student %s", absence.date, absence.student_id)
    return absence


async def update_absence(db: AsyncSession, absence_id, payload: AbsenceCreate) -> Absence:
    absence = await get_or_404(db, Absence, absence_id, "Absence")
    await get_user_with_role(db, payload.student_id, Role.STUDENT)
    _check_justification(payload.justified, payload.justification)
    for field, value in payload.model_dump().items():
        setattr(absence, field, value)
    return await save(db, absence)


async def get_absence(db: AsyncSession, absence_id) -> Absence:
    return await get_or_404(db, Absence, absence_id, "Absence")


async def delete_absence(db: AsyncSession, absence_id):
    absence = await get_or_404(db, Absence, absence_id, "Absence")
    await db.delete(absence)
    await db.commit()


async def list_absences(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Absence).order_by(Absence.date.desc()), page, size)


async def list_all_absences(db: AsyncSession):
    return await list_all(db, select(Absence).order_by(Absence.date.desc()))


async def absence_exists(db: AsyncSession, absence_id) -> bool:
    return await exists_by_id(db, Absence, absence_id)


# --- QUERIES ---
async def find_by_student(db: AsyncSession, student_id):
    await get_user_with_role(db, student_id, Role.STUDENT)
    return await list_all(db, select(Absence).where(Absence.student_id == student_id).order_by(Absence.date))


def _class_absences(class_id):
    return (
        select(Absence)
        .join(User, Absence.student_id == User.id)
        .where(User.class_id == class_id)
    )


async def find_by_class(db: AsyncSession, class_id):
    await ensure_exists(db, Class, class_id, "Class")
    return await list_all(db, _class_absences(class_id).order_by(Absence.date))


async def find_by_status(db: AsyncSession, status: AbsenceStatus):
    return await list_all(db, select(Absence).where(Absence.status == status).order_by(Absence.date))


async def find_by_status_and_student(db: AsyncSession, status: AbsenceStatus, student_id):
    await get_user_with_role(db, student_id, Role.STUDENT)
    stmt = select(Absence).where(Absence.status == status, Absence.student_id == student_id).order_by(Absence.date)
    return await list_all(db, stmt)


async def find_by_date_range(db: AsyncSession, start: date, end: date, student_id=None):
    if start > end:
        raise ValidationError("Start date must be before end date")
    stmt = select(Absence).where(Absence.date >= start, Absence.date <= end)
    if student_id is not None:
        await get_user_with_role(db, student_id, Role.STUDENT)
        stmt = stmt.where(Absence.student_id == student_id)
    return await list_all(db, stmt.order_by(Absence.date))


async def list_justified(db: AsyncSession, justified: bool = True):
    return await list_all(db, select(Absence).where(Absence.justified.is_(justified)).order_by(Absence.date))


# --- JUSTIFICATION / STATUS ---
async def justify_absence(db: AsyncSession, absence_id, justification: str) -> Absence:
    absence = await get_or_404(db, Absence, absence_id, "Absence")
    _check_justification(True, justification)
    absence.justified = True
    absence.justification = justification.strip()
    return await save(db, absence)


async def mark_unjustified(db: AsyncSession, absence_id) -> Absence:
    absence = await get_or_404(db, Absence, absence_id, "Absence")
    absence.justified = False
    absence.justification = None
    return await save(db, absence)


async def change_status(db: AsyncSession, absence_id, status: AbsenceStatus) -> Absence:
    absence = await get_or_404(db, Absence, absence_id, "Absence")
    absence.status = status
    absence = await save(db, absence)
    logger.info("Absence %s marked %s", absence.id, status.value)
    return absence


# --- STATISTICS ---
async def _by_status(db: AsyncSession, stmt) -> dict:
    counts = {status.value: 0 for status in AbsenceStatus}
    subquery = stmt.subquery()
    result = await db.execute(select(subquery.c.status, func.count()).group_by(subquery.c.status))
    for status, status_count in result.all():
        counts[AbsenceStatus(status).value] = status_count
    return counts


def _percentage(part: int, total: int) -> float:
    return round(part * 100.0 / total, 2) if total else 0.0


async def student_statistics(db: AsyncSession, student_id) -> dict:
    student = await get_user_with_role(db, student_id, Role.STUDENT)
    stmt = select(Absence).where(Absence.student_id == student_id)
    total = await count(db, stmt)
    justified = await count(db, stmt.where(Absence.justified.is_(True)))
    return {
        "student_id": student.id,
        "student_name": student.full_name,
        "total_absences": total,
        "justified_absences": justified,
        "unjustified_absences": total - justified,
        "justified_percentage": _percentage(justified, total),
        "unjustified_percentage": _percentage(total - justified, total),
        "absences_by_status": await _by_status(db, stmt),
    }


async def class_statistics(db: AsyncSession, class_id) -> dict:
    school_class = await get_or_404(db, Class, class_id, "Class")
    total_students = await count(db, select(User).where(User.class_id == class_id, User.role == Role.STUDENT))
    total_absences = await count(db, _class_absences(class_id))

    result = await db.execute(
        select(User.id, User.first_name, User.last_name, func.count(Absence.id).label("absences"))
        .join(Absence, Absence.student_id == User.id)
        .where(User.class_id == class_id)
        .group_by(User.id, User.first_name, User.last_name)
        .order_by(func.count(Absence.id).desc(), User.last_name)
        .limit(TOP_ABSENT_LIMIT)
    )
    top_absent = [
        {"student_id": row.id, "student_name": f"{row.first_name} {row.last_name}", "absences": row.absences}
        for row in result.all()
    ]

    return {
        "class_id": school_class.id,
        "class_name": school_class.name,
        "total_students": total_students,
        "total_absences": total_absences,
        "average_absences_per_student": round(total_absences / total_students, 2) if total_students else 0.0,
        "absences_by_status": await _by_status(db, _class_absences(class_id)),
        "top_absent_students": top_absent,
    }


async def count_by_student(db: AsyncSession, student_id) -> int:
    await get_user_with_role(db, student_id, Role.STUDENT)
    return await count(db, select(Absence).where(Absence.student_id == student_id))


async def count_by_class(db: AsyncSession, class_id) -> int:
    await ensure_exists(db, Class, class_id, "Class")
    return await count(db, _class_absences(class_id))


async def delete_by_student(db: AsyncSession, student_id):
    await get_user_with_role(db, student_id, Role.STUDENT)
    await db.execute(delete(Absence).where(Absence.student_id == student_id))
    await db.commit()
