# services/academics/api/class_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import class_service, program_associations, subject_service
from services.academics.schemas.classes import ClassCreate, ClassOut
from services.academics.schemas.programs import ClassProgramStatistics
from services.academics.schemas.subjects import SubjectOut
from services.user_management.schemas.users import UserOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/classes", tags=["Classes"])

can_read = Depends(require_permissions("class:read"))
can_write = Depends(require_permissions("class:write"))
can_delete = Depends(require_permissions("class:delete"))


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_class(payload: ClassCreate, db: AsyncSession = Depends(get_db)):
    return await class_service.create_class(db, payload)


@router.get("", response_model=Page[ClassOut], dependencies=[can_read])
async def list_classes(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await class_service.list_classes(db, params.page, params.size)


@router.get("/all", response_model=List[ClassOut], dependencies=[can_read])
async def all_classes(db: AsyncSession = Depends(get_db)):
    return await class_service.list_all_classes(db)


@router.get("/by-level/{level_id}", response_model=List[ClassOut], dependencies=[can_read])
async def classes_by_level(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.find_by_level(db, level_id)


@router.get("/by-level/{level_id}/count", dependencies=[can_read])
async def count_classes_by_level(level_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await class_service.count_by_level(db, level_id)}


@router.get("/by-department/{department_id}", response_model=List[ClassOut], dependencies=[can_read])
async def classes_by_department(department_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.find_by_department(db, department_id)


@router.get("/by-program/{program_id}", response_model=List[ClassOut], dependencies=[can_read])
async def classes_by_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.find_by_program(db, program_id)


@router.get("/by-program/{program_id}/count", dependencies=[can_read])
async def count_classes_by_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await class_service.count_by_program(db, program_id)}


@router.get("/by-subject/{subject_id}", response_model=List[ClassOut], dependencies=[can_read])
async def classes_by_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.find_by_subject(db, subject_id)


@router.get("/{class_id}", response_model=ClassOut, dependencies=[can_read])
async def get_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.get_class(db, class_id)


@router.get("/{class_id}/exists", dependencies=[can_read])
async def class_exists(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await class_service.class_exists(db, class_id)}


@router.get("/{class_id}/students", response_model=List[UserOut], dependencies=[can_read])
async def class_students(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await class_service.list_students(db, class_id)


@router.get("/{class_id}/students/count", dependencies=[can_read])
async def count_class_students(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await class_service.count_students(db, class_id)}


@router.get("/{class_id}/subjects", response_model=List[SubjectOut], dependencies=[can_read])
async def class_subjects(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await subject_service.find_by_class(db, class_id)


@router.get("/{class_id}/program-statistics", response_model=ClassProgramStatistics, dependencies=[can_read])
async def class_program_statistics(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.class_program_statistics(db, class_id)


@router.put("/{class_id}", response_model=ClassOut, dependencies=[can_write])
async def update_class(class_id: UUID, payload: ClassCreate, db: AsyncSession = Depends(get_db)):
    return await class_service.update_class(db, class_id, payload)


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    await class_service.delete_class(db, class_id)
