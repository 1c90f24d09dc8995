# services/scheduling/controllers/conflicts.py
"""Overlap detection for a teacher's sessions.

Sessions are half-open intervals: ``[a.start, a.end)`` and ``[b.start, b.end)``
overlap iff ``a.start < b.end and a.end > b.start``. A session ending at 10:00
and one starting at 10:00 do not conflict.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.scheduling.models.sessions import Session
from services.user_management.controllers.user_service import get_user_with_role
from services.user_management.models.users import Role
from shared.errors import ValidationError


def to_naive_utc(value: datetime) -> datetime:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def overlapping_stmt(start: datetime, end: datetime, teacher_id=None, exclude_session_id=None):
    stmt = select(Session).where(Session.start_time < end, Session.end_time > start)
    if teacher_id is not None:
        stmt = stmt.where(Session.teacher_id == teacher_id)
    if exclude_session_id is not None:
        stmt = stmt.where(Session.id != exclude_session_id)
    return stmt.order_by(Session.start_time)


def check_range(start: Optional[datetime], end: Optional[datetime]):
    if start is None or end is None:
        raise ValidationError("Start time and end time are required")
    start, end = to_naive_utc(start), to_naive_utc(end)
    if start >= end:
        raise ValidationError("Start time must be before end time")
    return start, end


async def find_overlapping(
    db: AsyncSession,
    teacher_id,
    start: datetime,
    end: datetime,
    exclude_session_id=None,
) -> List[Session]:
    start, end = check_range(start, end)
    await get_user_with_role(db, teacher_id, Role.TEACHER)
    result = await db.execute(overlapping_stmt(start, end, teacher_id, exclude_session_id))
    return result.scalars().all()


async def can_schedule(
    db: AsyncSession,
    teacher_id,
    start: datetime,
    end: datetime,
    exclude_session_id=None,
) -> bool:
    return not await find_overlapping(db, teacher_id, start, end, exclude_session_id)
