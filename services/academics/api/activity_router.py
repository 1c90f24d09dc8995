# services/academics/api/activity_router.py
from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import activity_service
from services.academics.models.activities import ActivityType
from services.academics.schemas.activities import ActivityCreate, ActivityOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/activities", tags=["Activities"])

can_read = Depends(require_permissions("course:read"))
can_write = Depends(require_permissions("course:write"))
can_delete = Depends(require_permissions("course:delete"))


@router.post("", response_model=ActivityOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_activity(payload: ActivityCreate, db: AsyncSession = Depends(get_db)):
    return await activity_service.create_activity(db, payload)


@router.get("", response_model=Page[ActivityOut], dependencies=[can_read])
async def list_activities(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await activity_service.list_activities(db, params.page, params.size)


@router.get("/all", response_model=List[ActivityOut], dependencies=[can_read])
async def all_activities(db: AsyncSession = Depends(get_db)):
    return await activity_service.list_all_activities(db)


@router.get("/search", response_model=List[ActivityOut], dependencies=[can_read])
async def search_activities(query: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await activity_service.search_by_title(db, query)


@router.get("/by-subject/{subject_id}", response_model=List[ActivityOut], dependencies=[can_read])
async def activities_by_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await activity_service.find_by_subject(db, subject_id)


@router.get("/by-type/{activity_type}", response_model=List[ActivityOut], dependencies=[can_read])
async def activities_by_type(activity_type: ActivityType, db: AsyncSession = Depends(get_db)):
    return await activity_service.find_by_type(db, activity_type)


@router.get("/date-range", response_model=List[ActivityOut], dependencies=[can_read])
async def activities_in_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: AsyncSession = Depends(get_db)
):
    return await activity_service.find_by_date_range(db, start, end)


@router.get("/{activity_id}", response_model=ActivityOut, dependencies=[can_read])
async def get_activity(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    return await activity_service.get_activity(db, activity_id)


@router.get("/{activity_id}/exists", dependencies=[can_read])
async def activity_exists(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await activity_service.activity_exists(db, activity_id)}


@router.put("/{activity_id}", response_model=ActivityOut, dependencies=[can_write])
async def update_activity(activity_id: UUID, payload: ActivityCreate, db: AsyncSession = Depends(get_db)):
    return await activity_service.update_activity(db, activity_id, payload)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_activity(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    await activity_service.delete_activity(db, activity_id)
