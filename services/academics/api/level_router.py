# services/academics/api/level_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import class_service, level_service
from services.academics.schemas.classes import ClassOut
from services.academics.schemas.levels import LevelCreate, LevelHierarchy, LevelOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/levels", tags=["Levels"])

can_read = Depends(require_permissions("class:read"))
can_write = Depends(require_permissions("class:write"))
can_delete = Depends(require_permissions("class:delete"))


@router.post("", response_model=LevelOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_level(payload: LevelCreate, db: AsyncSession = Depends(get_db)):
    return await level_service.create_level(db, payload)


@router.get("", response_model=Page[LevelOut], dependencies=[can_read])
async def list_levels(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await level_service.list_levels(db, params.page, params.size)


@router.get("/all", response_model=List[LevelOut], dependencies=[can_read])
async def all_levels(db: AsyncSession = Depends(get_db)):
    return await level_service.list_all_levels(db)


@router.get("/search", response_model=List[LevelOut], dependencies=[can_read])
async def search_levels(query: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await level_service.search_by_name(db, query)


@router.get("/by-department/{department_id}", response_model=List[LevelOut], dependencies=[can_read])
async def levels_by_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return await level_service.find_by_department(db, department_id)


@router.get("/by-department/{department_id}/count", dependencies=[can_read])
async def count_levels_by_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await level_service.count_by_department(db, department_id)}


@router.get("/{level_id}", response_model=LevelOut, dependencies=[can_read])
async def get_level(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return await level_service.get_level(db, level_id)


@router.get("/{level_id}/exists", dependencies=[can_read])
async def level_exists(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await level_service.level_exists(db, level_id)}


@router.get("/{level_id}/classes", response_model=List[ClassOut], dependencies=[can_read])
async def level_classes(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.find_by_level(db, level_id)


@router.get("/{level_id}/classes/count", dependencies=[can_read])
async def count_level_classes(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await level_service.count_classes(db, level_id)}


@router.get("/{level_id}/hierarchy", response_model=LevelHierarchy, dependencies=[can_read])
async def level_hierarchy(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return LevelHierarchy(level_id=level_id, path=await level_service.hierarchy_path(db, level_id))


@router.put("/{level_id}", response_model=LevelOut, dependencies=[can_write])
async def update_level(level_id: UUID, payload: LevelCreate, db: AsyncSession = Depends(get_db)):
    return await level_service.update_level(db, level_id, payload)


@router.delete("/{level_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_level(level_id: UUID, db: AsyncSession = Depends(get_db)):
    await level_service.delete_level(db, level_id)
