# services/scheduling/controllers/session_service.py
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.subjects import Subject
from services.scheduling.controllers.conflicts import check_range, overlapping_stmt, to_naive_utc
from services.scheduling.locks import teacher_schedule_lock
from services.scheduling.models.sessions import Session
from services.scheduling.schemas.sessions import SessionCreate
from services.user_management.controllers.user_service import get_user_with_role
from services.user_management.models.users import User, Role
from shared.config import MIN_SESSION_MINUTES
from shared.crud import count, ensure_exists, get_or_404, list_all, paginate
from shared.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def _hours(session: Session) -> float:
    return (session.end_time - session.start_time).total_seconds() / 3600


def _validate_slot(payload: SessionCreate):
    start, end = check_range(payload.start_time, payload.end_time)
    if end - start < timedelta(minutes=MIN_SESSION_MINUTES):
        raise ValidationError(f"Session duration must be at least {MIN_SESSION_MINUTES} minutes")
    if payload.teacher_id is None:
        raise ValidationError("Session must have a teacher")
    if payload.subject_id is None:
        raise ValidationError("Session must have a subject")
    return start, end


async def _validate_references(db: AsyncSession, payload: SessionCreate):
    teacher = await get_user_with_role(db, payload.teacher_id, Role.TEACHER)
    await ensure_exists(db, Subject, payload.subject_id, "Subject")
    return teacher


async def _ensure_available(db: AsyncSession, teacher: User, start, end, exclude_session_id=None):
    result = await db.execute(overlapping_stmt(start, end, teacher.id, exclude_session_id))
    clash = result.scalars().first()
    if clash is not None:
        logger.warning(
            "Rejected slot %s to %s for teacher %s: overlaps session %s", start, end, teacher.username, clash.id
        )
        raise ConflictError(
            f"Teacher {teacher.full_name} already has a session from "
            f"{clash.start_time.isoformat()} to {clash.end_time.isoformat()}"
        )


async def create_session(db: AsyncSession, payload: SessionCreate) -> Session:
    logger.debug("Scheduling request: %s", payload)
    start, end = _validate_slot(payload)
    teacher = await _validate_references(db, payload)

    async with teacher_schedule_lock(db, teacher.id):
        await _ensure_available(db, teacher, start, end)
        session = Session(start_time=start, end_time=end, teacher_id=teacher.id, subject_id=payload.subject_id)
        db.add(session)
        await db.commit()

    await db.refresh(session)
    logger.info("Scheduled session %s for teacher %s (%s to %s)", session.id, teacher.username, start, end)
    return session


async def update_session(db: AsyncSession, session_id, payload: SessionCreate) -> Session:
    logger.debug("Reschedule request for session %s: %s", session_id, payload)
    session = await get_or_404(db, Session, session_id, "Session")
    start, end = _validate_slot(payload)
    teacher = await _validate_references(db, payload)

    rescheduled = (
        start != session.start_time
        or end != session.end_time
        or teacher.id != session.teacher_id
    )

    async with teacher_schedule_lock(db, teacher.id):
        if rescheduled:
            await _ensure_available(db, teacher, start, end, exclude_session_id=session.id)
        session.start_time = start
        session.end_time = end
        session.teacher_id = teacher.id
        session.subject_id = payload.subject_id
        await db.commit()

    await db.refresh(session)
    logger.info("Updated session %s", session.id)
    return session


async def delete_session(db: AsyncSession, session_id):
    session = await get_or_404(db, Session, session_id, "Session")
    await db.delete(session)
    await db.commit()
    logger.info("Deleted session %s", session_id)


async def get_session(db: AsyncSession, session_id) -> Session:
    return await get_or_404(db, Session, session_id, "Session")


async def list_sessions(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Session).order_by(Session.start_time), page, size)


async def list_all_sessions(db: AsyncSession):
    return await list_all(db, select(Session).order_by(Session.start_time))


# --- READ MODELS ---
def _read_range(start: Optional[datetime], end: Optional[datetime]):
    if start is None or end is None:
        raise ValidationError("Start date and end date cannot be null")
    start, end = to_naive_utc(start), to_naive_utc(end)
    if start > end:
        raise ValidationError("Start date cannot be after end date")
    return start, end


def _by_teacher(teacher_id):
    return select(Session).where(Session.teacher_id == teacher_id).order_by(Session.start_time)


def _by_subject(subject_id):
    return select(Session).where(Session.subject_id == subject_id).order_by(Session.start_time)


def _contained(start, end):
    return select(Session).where(Session.start_time >= start, Session.end_time <= end).order_by(Session.start_time)


async def find_by_teacher(db: AsyncSession, teacher_id):
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    return await list_all(db, _by_teacher(teacher_id))


async def find_by_teacher_paginated(db: AsyncSession, teacher_id, page: int, size: int) -> dict:
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    return await paginate(db, _by_teacher(teacher_id), page, size)


async def find_by_subject(db: AsyncSession, subject_id):
    await ensure_exists(db, Subject, subject_id, "Subject")
    return await list_all(db, _by_subject(subject_id))


async def find_by_subject_paginated(db: AsyncSession, subject_id, page: int, size: int) -> dict:
    await ensure_exists(db, Subject, subject_id, "Subject")
    return await paginate(db, _by_subject(subject_id), page, size)


async def find_by_date_range(db: AsyncSession, start: datetime, end: datetime):
    """Sessions lying entirely inside ``[start, end]``."""
    start, end = _read_range(start, end)
    return await list_all(db, _contained(start, end))


async def find_by_teacher_and_date_range(db: AsyncSession, teacher_id, start: datetime, end: datetime):
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    start, end = _read_range(start, end)
    return await list_all(db, _contained(start, end).where(Session.teacher_id == teacher_id))


async def find_all_overlapping(db: AsyncSession, start: datetime, end: datetime):
    """Sessions of any teacher that intersect ``[start, end)``."""
    start, end = check_range(start, end)
    return await list_all(db, overlapping_stmt(start, end))


async def count_by_teacher(db: AsyncSession, teacher_id) -> int:
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    return await count(db, _by_teacher(teacher_id))


async def count_by_subject(db: AsyncSession, subject_id) -> int:
    await ensure_exists(db, Subject, subject_id, "Subject")
    return await count(db, _by_subject(subject_id))


async def delete_by_teacher(db: AsyncSession, teacher_id):
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    await db.execute(delete(Session).where(Session.teacher_id == teacher_id))
    await db.commit()
    logger.info("Deleted all sessions of teacher %s", teacher_id)


async def delete_by_subject(db: AsyncSession, subject_id):
    await ensure_exists(db, Subject, subject_id, "Subject")
    await db.execute(delete(Session).where(Session.subject_id == subject_id))
    await db.commit()
    logger.info("Deleted all sessions of subject %s", subject_id)


async def teacher_total_hours(db: AsyncSession, teacher_id, start: datetime, end: datetime) -> float:
    sessions = await find_by_teacher_and_date_range(db, teacher_id, start, end)
    return round(sum(_hours(session) for session in sessions), 2)


# --- STATISTICS ---
async def get_statistics(db: AsyncSession, start: datetime, end: datetime) -> dict:
    start, end = _read_range(start, end)
    result = await db.execute(
        select(Session, Subject.name, User.first_name, User.last_name)
        .join(Subject, Session.subject_id == Subject.id)
        .join(User, Session.teacher_id == User.id)
        .where(Session.start_time >= start, Session.end_time <= end)
    )
    rows = result.all()

    total_hours = sum(_hours(row.Session) for row in rows)
    by_subject = Counter(row.name for row in rows)
    by_teacher = Counter(f"{row.first_name} {row.last_name}" for row in rows)

    return {
        "total_sessions": len(rows),
        "total_hours": round(total_hours, 2),
        "sessions_by_subject": dict(by_subject),
        "sessions_by_teacher": dict(by_teacher),
        "average_session_duration": round(total_hours / len(rows), 2) if rows else 0.0,
    }


async def get_teacher_statistics(db: AsyncSession, teacher_id, start: datetime, end: datetime) -> dict:
    teacher = await get_user_with_role(db, teacher_id, Role.TEACHER)
    start, end = _read_range(start, end)
    result = await db.execute(
        select(Session, Subject.name)
        .join(Subject, Session.subject_id == Subject.id)
        .where(Session.teacher_id == teacher_id, Session.start_time >= start, Session.end_time <= end)
    )
    rows = result.all()

    sessions_by_subject = Counter()
    hours_by_subject = defaultdict(float)
    for row in rows:
        sessions_by_subject[row.name] += 1
        hours_by_subject[row.name] += _hours(row.Session)
    total_hours = sum(hours_by_subject.values())

    return {
        "teacher_id": teacher.id,
        "teacher_name": teacher.full_name,
        "total_sessions": len(rows),
        "total_hours": round(total_hours, 2),
        "sessions_by_subject": dict(sessions_by_subject),
        "hours_by_subject": {name: round(hours, 2) for name, hours in hours_by_subject.items()},
        "average_session_duration": round(total_hours / len(rows), 2) if rows else 0.0,
    }
