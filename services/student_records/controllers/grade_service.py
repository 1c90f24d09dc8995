# services/student_records/controllers/grade_service.py
import logging
from typing import Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.activities import Activity
from services.student_records.models.grades import Grade
from services.student_records.schemas.grades import GradeCreate
from services.user_management.controllers.user_service import get_user_with_role
from services.user_management.models.users import Role
from shared.crud import ensure_exists, exists_by_id, get_or_404, list_all, paginate, save

logger = logging.getLogger(__name__)


async def _check_references(db: AsyncSession, payload: GradeCreate):
    await get_user_with_role(db, payload.student_id, Role.STUDENT)
    await ensure_exists(db, Activity, payload.activity_id, "Activity")


async def create_grade(db: AsyncSession, payload: GradeCreate) -> Grade:
    await _check_references(db, payload)
    grade = await save(db, Grade(**payload.model_dump()))
    logger.info("Recorded grade %.2f for student %s", grade.value, grade.student_id)
    return grade


async def update_grade(db: AsyncSession, grade_id, payload: GradeCreate) -> Grade:
    grade = await get_or_404(db, Grade, grade_id, "Grade")
    await _check_references(db, payload)
    grade.value = payload.value
    grade.student_id = payload.student_id
    grade.activity_id = payload.activity_id
    return await save(db, grade)


async def get_grade(db: AsyncSession, grade_id) -> Grade:
    return await get_or_404(db, Grade, grade_id, "Grade")


async def delete_grade(db: AsyncSession, grade_id):
    grade = await get_or_404(db, Grade, grade_id, "Grade")
    await db.delete(grade)
    await db.commit()


async def list_grades(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Grade).order_by(Grade.created_at.desc()), page, size)


async def list_all_grades(db: AsyncSession):
    return await list_all(db, select(Grade).order_by(Grade.created_at.desc()))


async def grade_exists(db: AsyncSession, grade_id) -> bool:
    return await exists_by_id(db, Grade, grade_id)


async def find_by_student(db: AsyncSession, student_id):
    await get_user_with_role(db, student_id, Role.STUDENT)
    return await list_all(db, select(Grade).where(Grade.student_id == student_id).order_by(Grade.created_at))


async def find_by_activity(db: AsyncSession, activity_id):
    await ensure_exists(db, Activity, activity_id, "Activity")
    return await list_all(db, select(Grade).where(Grade.activity_id == activity_id).order_by(Grade.value.desc()))


async def _average(db: AsyncSession, condition) -> Optional[float]:
    result = await db.execute(select(func.avg(Grade.value)).where(condition))
    average = result.scalar()
    return round(float(average), 2) if average is not None else None


async def student_average(db: AsyncSession, student_id) -> Optional[float]:
    await get_user_with_role(db, student_id, Role.STUDENT)
    return await _average(db, Grade.student_id == student_id)


async def activity_average(db: AsyncSession, activity_id) -> Optional[float]:
    await ensure_exists(db, Activity, activity_id, "Activity")
    return await _average(db, Grade.activity_id == activity_id)


async def delete_by_student(db: AsyncSession, student_id):
    await get_user_with_role(db, student_id, Role.STUDENT)
    await db.execute(delete(Grade).where(Grade.student_id == student_id))
    await db.commit()


async def delete_by_activity(db: AsyncSession, activity_id):
    await ensure_exists(db, Activity, activity_id, "Activity")
    await db.execute(delete(Grade).where(Grade.activity_id == activity_id))
    await db.commit()
