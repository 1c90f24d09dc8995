# services/scheduling/api/session_router.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.scheduling.controllers import conflicts, session_service
from services.scheduling.schemas.sessions import (
    ScheduleCheck,
    SessionCreate,
    SessionOut,
    SessionStatistics,
    TeacherHours,
    TeacherSessionStatistics,
)
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])

can_read = Depends(require_permissions("schedule:read"))
can_write = Depends(require_permissions("schedule:write"))


@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_session(payload: SessionCreate, db: AsyncSession = Depends(get_db)):
    return await session_service.create_session(db, payload)


@router.get("", response_model=Page[SessionOut], dependencies=[can_read])
async def list_sessions(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await session_service.list_sessions(db, params.page, params.size)


@router.get("/all", response_model=List[SessionOut], dependencies=[can_read])
async def all_sessions(db: AsyncSession = Depends(get_db)):
    return await session_service.list_all_sessions(db)


@router.get("/date-range", response_model=List[SessionOut], dependencies=[can_read])
async def sessions_in_range(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await session_service.find_by_date_range(db, start, end)


@router.get("/overlapping", response_model=List[SessionOut], dependencies=[can_read])
async def overlapping_sessions(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await session_service.find_all_overlapping(db, start, end)


@router.get("/can-schedule", response_model=ScheduleCheck, dependencies=[can_read])
async def can_schedule(
    teacher_id: UUID = Query(...),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    exclude_session_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db)
):
    available = await conflicts.can_schedule(db, teacher_id, start, end, exclude_session_id)
    return ScheduleCheck(teacher_id=teacher_id, start_time=start, end_time=end, can_schedule=available)


@router.get("/statistics", response_model=SessionStatistics, dependencies=[can_read])
async def session_statistics(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await session_service.get_statistics(db, start, end)


# --- BY TEACHER ---
@router.get("/teacher/{teacher_id}", response_model=List[SessionOut], dependencies=[can_read])
async def sessions_by_teacher(teacher_id: UUID, db: AsyncSession = Depends(get_db)):
    return await session_service.find_by_teacher(db, teacher_id)


@router.get("/teacher/{teacher_id}/paged", response_model=Page[SessionOut], dependencies=[can_read])
async def sessions_by_teacher_paged(
    teacher_id: UUID,
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db)
):
    return await session_service.find_by_teacher_paginated(db, teacher_id, params.page, params.size)


@router.get("/teacher/{teacher_id}/count", dependencies=[can_read])
async def count_teacher_sessions(teacher_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await session_service.count_by_teacher(db, teacher_id)}


@router.get("/teacher/{teacher_id}/date-range", response_model=List[SessionOut], dependencies=[can_read])
async def teacher_sessions_in_range(
    teacher_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await session_service.find_by_teacher_and_date_range(db, teacher_id, start, end)


@router.get("/teacher/{teacher_id}/overlapping", response_model=List[SessionOut], dependencies=[can_read])
async def teacher_overlapping_sessions(
    teacher_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    exclude_session_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db)
):
    return await conflicts.find_overlapping(db, teacher_id, start, end, exclude_session_id)


@router.get("/teacher/{teacher_id}/hours", response_model=TeacherHours, dependencies=[can_read])
async def teacher_total_hours(
    teacher_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    hours = await session_service.teacher_total_hours(db, teacher_id, start, end)
    return TeacherHours(teacher_id=teacher_id, total_hours=hours)


@router.get("/teacher/{teacher_id}/statistics", response_model=TeacherSessionStatistics, dependencies=[can_read])
async def teacher_statistics(
    teacher_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await session_service.get_teacher_statistics(db, teacher_id, start, end)


@router.delete("/teacher/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def delete_teacher_sessions(teacher_id: UUID, db: AsyncSession = Depends(get_db)):
    await session_service.delete_by_teacher(db, teacher_id)


# --- BY SUBJECT ---
@router.get("/subject/{subject_id}", response_model=List[SessionOut], dependencies=[can_read])
async def sessions_by_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await session_service.find_by_subject(db, subject_id)


@router.get("/subject/{subject_id}/paged", response_model=Page[SessionOut], dependencies=[can_read])
async def sessions_by_subject_paged(
    subject_id: UUID,
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db)
):
    return await session_service.find_by_subject_paginated(db, subject_id, params.page, params.size)


@router.get("/subject/{subject_id}/count", dependencies=[can_read])
async def count_subject_sessions(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await session_service.count_by_subject(db, subject_id)}


@router.delete("/subject/{subject_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def delete_subject_sessions(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    await session_service.delete_by_subject(db, subject_id)


# --- SINGLE SESSION ---
@router.get("/{session_id}", response_model=SessionOut, dependencies=[can_read])
async def get_session(session_id: UUID, db: AsyncSession = Depends(get_db)):
    return await session_service.get_session(db, session_id)


@router.put("/{session_id}", response_model=SessionOut, dependencies=[can_write])
async def update_session(session_id: UUID, payload: SessionCreate, db: AsyncSession = Depends(get_db)):
    return await session_service.update_session(db, session_id, payload)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def delete_session(session_id: UUID, db: AsyncSession = Depends(get_db)):
    await session_service.delete_session(db, session_id)
