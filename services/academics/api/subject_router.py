# services/academics/api/subject_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import program_associations, subject_service
from services.academics.schemas.programs import SubjectProgramStatistics
from services.academics.schemas.subjects import SubjectCreate, SubjectOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/subjects", tags=["Subjects"])

can_read = Depends(require_permissions("course:read"))
can_write = Depends(require_permissions("course:write"))
can_delete = Depends(require_permissions("course:delete"))


@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_subject(payload: SubjectCreate, db: AsyncSession = Depends(get_db)):
    return await subject_service.create_subject(db, payload)


@router.get("", response_model=Page[SubjectOut], dependencies=[can_read])
async def list_subjects(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await subject_service.list_subjects(db, params.page, params.size)


@router.get("/all", response_model=List[SubjectOut], dependencies=[can_read])
async def all_subjects(db: AsyncSession = Depends(get_db)):
    return await subject_service.list_all_subjects(db)


@router.get("/search", response_model=List[SubjectOut], dependencies=[can_read])
async def search_subjects(query: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await subject_service.search_by_name(db, query)


@router.get("/by-class/{class_id}", response_model=List[SubjectOut], dependencies=[can_read])
async def subjects_by_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await subject_service.find_by_class(db, class_id)


@router.get("/by-program/{program_id}", response_model=List[SubjectOut], dependencies=[can_read])
async def subjects_by_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return await subject_service.find_by_program(db, program_id)


@router.get("/by-program/{program_id}/count", dependencies=[can_read])
async def count_subjects_by_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await subject_service.count_by_program(db, program_id)}


@router.get("/{subject_id}", response_model=SubjectOut, dependencies=[can_read])
async def get_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await subject_service.get_subject(db, subject_id)


@router.get("/{subject_id}/exists", dependencies=[can_read])
async def subject_exists(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await subject_service.subject_exists(db, subject_id)}


@router.get("/{subject_id}/program-statistics", response_model=SubjectProgramStatistics, dependencies=[can_read])
async def subject_program_statistics(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.subject_program_statistics(db, subject_id)


@router.put("/{subject_id}", response_model=SubjectOut, dependencies=[can_write])
async def update_subject(subject_id: UUID, payload: SubjectCreate, db: AsyncSession = Depends(get_db)):
    return await subject_service.update_subject(db, subject_id, payload)


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    await subject_service.delete_subject(db, subject_id)
