# services/academics/api/department_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import department_service, level_service
from services.academics.schemas.departments import DepartmentCreate, DepartmentOut
from services.academics.schemas.levels import LevelOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/departments", tags=["Departments"])

can_read = Depends(require_permissions("class:read"))
can_write = Depends(require_permissions("class:write"))
can_delete = Depends(require_permissions("class:delete"))


@router.post("", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_department(payload: DepartmentCreate, db: AsyncSession = Depends(get_db)):
    return await department_service.create_department(db, payload)


@router.get("", response_model=Page[DepartmentOut], dependencies=[can_read])
async def list_departments(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await department_service.list_departments(db, params.page, params.size)


@router.get("/all", response_model=List[DepartmentOut], dependencies=[can_read])
async def all_departments(db: AsyncSession = Depends(get_db)):
    return await department_service.list_all_departments(db)


@router.get("/by-name", response_model=DepartmentOut, dependencies=[can_read])
async def department_by_name(name: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await department_service.find_by_name(db, name)


@router.get("/{department_id}", response_model=DepartmentOut, dependencies=[can_read])
async def get_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return await department_service.get_department(db, department_id)


@router.get("/{department_id}/exists", dependencies=[can_read])
async def department_exists(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await department_service.department_exists(db, department_id)}


@router.get("/{department_id}/levels", response_model=List[LevelOut], dependencies=[can_read])
async def department_levels(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return await level_service.find_by_department(db, department_id)


@router.put("/{department_id}", response_model=DepartmentOut, dependencies=[can_write])
async def update_department(department_id: UUID, payload: DepartmentCreate, db: AsyncSession = Depends(get_db)):
    return await department_service.update_department(db, department_id, payload)


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    await department_service.delete_department(db, department_id)
