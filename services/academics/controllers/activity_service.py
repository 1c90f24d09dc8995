# services/academics/controllers/activity_service.py
import logging
from datetime import datetime

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.activities import Activity, ActivityType
from services.academics.models.subjects import Subject
from services.academics.schemas.activities import ActivityCreate
from services.student_records.models.grades import Grade
from shared.crud import ensure_exists, exists_by_id, get_or_404, list_all, paginate, save
from shared.errors import ValidationError

logger = logging.getLogger(__name__)


def _apply(activity: Activity, payload: ActivityCreate):
    activity.type = payload.type
    activity.title = payload.title
    activity.date = payload.date
    activity.resources = payload.resources
    activity.description = payload.description
    activity.subject_id = payload.subject_id


async def create_activity(db: AsyncSession, payload: ActivityCreate) -> Activity:
    if payload.subject_id is not None:
        await ensure_exists(db, Subject, payload.subject_id, "Subject")
    activity = Activity()
    _apply(activity, payload)
    activity = await save(db, activity)
    logger.info("Created %s activity %s", activity.type.value, activity.title)
    return activity


async def update_activity(db: AsyncSession, activity_id, payload: ActivityCreate) -> Activity:
    activity = await get_or_404(db, Activity, activity_id, "Activity")
    if payload.subject_id is not None:
        await ensure_exists(db, Subject, payload.subject_id, "Subject")
    _apply(activity, payload)
    return await save(db, activity)


async def get_activity(db: AsyncSession, activity_id) -> Activity:
    return await get_or_404(db, Activity, activity_id, "Activity")


async def delete_activity(db: AsyncSession, activity_id):
    activity = await get_or_404(db, Activity, activity_id, "Activity")
    await db.execute(delete(Grade).where(Grade.activity_id == activity_id))
    await db.delete(activity)
    await db.commit()
    logger.info("Deleted activity %s", activity.title)


async def list_activities(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Activity).order_by(Activity.date.desc(), Activity.title), page, size)


async def list_all_activities(db: AsyncSession):
    return await list_all(db, select(Activity).order_by(Activity.date.desc(), Activity.title))


async def activity_exists(db: AsyncSession, activity_id) -> bool:
    return await exists_by_id(db, Activity, activity_id)


async def find_by_subject(db: AsyncSession, subject_id):
    await ensure_exists(db, Subject, subject_id, "Subject")
    return await list_all(db, select(Activity).where(Activity.subject_id == subject_id).order_by(Activity.date))


async def find_by_type(db: AsyncSession, activity_type: ActivityType):
    return await list_all(db, select(Activity).where(Activity.type == activity_type).order_by(Activity.date))


async def find_by_date_range(db: AsyncSession, start: datetime, end: datetime):
    if start > end:
        raise ValidationError("Start date must be before end date")
    stmt = select(Activity).where(Activity.date >= start, Activity.date <= end).order_by(Activity.date)
    return await list_all(db, stmt)


async def search_by_title(db: AsyncSession, term: str):
    term = (term or "").strip()
    if not term:
        raise ValidationError("Search term cannot be empty")
    stmt = select(Activity).where(func.lower(Activity.title).like(f"%{term.lower()}%")).order_by(Activity.title)
    return await list_all(db, stmt)
