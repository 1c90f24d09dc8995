# services/academics/api/program_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.academics.controllers import program_associations, program_service
from services.academics.schemas.classes import ClassOut
from services.academics.schemas.programs import ClassSubjectLink, ProgramCreate, ProgramDetailOut, ProgramOut
from services.academics.schemas.subjects import SubjectOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/programs", tags=["Programs"])

can_read = Depends(require_permissions("class:read"))
can_write = Depends(require_permissions("class:write"))
can_delete = Depends(require_permissions("class:delete"))


@router.post("", response_model=ProgramOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_program(payload: ProgramCreate, db: AsyncSession = Depends(get_db)):
    return await program_service.create_program(db, payload)


@router.get("", response_model=Page[ProgramOut], dependencies=[can_read])
async def list_programs(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await program_service.list_programs(db, params.page, params.size)


@router.get("/all", response_model=List[ProgramOut], dependencies=[can_read])
async def all_programs(db: AsyncSession = Depends(get_db)):
    return await program_service.list_all_programs(db)


# --- CLASS / SUBJECT LINKS ---
@router.post("/links", response_model=ProgramOut, dependencies=[can_write])
async def link_subject_to_class(payload: ClassSubjectLink, db: AsyncSession = Depends(get_db)):
    return await program_associations.link_subject_to_class(
        db, payload.class_id, payload.subject_id, payload.description
    )


@router.delete("/links", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def unlink_subject_from_class(
    class_id: UUID = Query(...),
    subject_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db)
):
    await program_associations.unlink_subject_from_class(db, class_id, subject_id)


@router.get("/links", response_model=ProgramOut, dependencies=[can_read])
async def program_for_class_and_subject(
    class_id: UUID = Query(...),
    subject_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db)
):
    return await program_associations.find_by_class_and_subject(db, class_id, subject_id)


@router.get("/links/exists", dependencies=[can_read])
async def link_exists(
    class_id: UUID = Query(...),
    subject_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db)
):
    return {"exists": await program_associations.exists_by_class_and_subject(db, class_id, subject_id)}


@router.get("/count/by-class/{class_id}", dependencies=[can_read])
async def count_by_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await program_associations.count_programs_by_class(db, class_id)}


@router.get("/count/by-subject/{subject_id}", dependencies=[can_read])
async def count_by_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await program_associations.count_programs_by_subject(db, subject_id)}


@router.put("/classes/{class_id}/detach", response_model=ClassOut, dependencies=[can_write])
async def detach_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.detach_class(db, class_id)


@router.put("/subjects/{subject_id}/detach", response_model=SubjectOut, dependencies=[can_write])
async def detach_subject(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.detach_subject(db, subject_id)


@router.delete("/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def remove_class_from_program(class_id: UUID, db: AsyncSession = Depends(get_db)):
    await program_associations.remove_class_from_program(db, class_id)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_write])
async def remove_subject_from_program(subject_id: UUID, db: AsyncSession = Depends(get_db)):
    await program_associations.remove_subject_from_program(db, subject_id)


# --- SINGLE PROGRAM ---
@router.get("/{program_id}", response_model=ProgramDetailOut, dependencies=[can_read])
async def get_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_service.get_program_detail(db, program_id)


@router.get("/{program_id}/exists", dependencies=[can_read])
async def program_exists(program_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await program_service.program_exists(db, program_id)}


@router.put("/{program_id}/classes/{class_id}", response_model=ClassOut, dependencies=[can_write])
async def assign_class(program_id: UUID, class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.assign_class(db, class_id, program_id)


@router.put("/{program_id}/subjects/{subject_id}", response_model=SubjectOut, dependencies=[can_write])
async def assign_subject(program_id: UUID, subject_id: UUID, db: AsyncSession = Depends(get_db)):
    return await program_associations.assign_subject(db, subject_id, program_id)


@router.put("/{program_id}", response_model=ProgramOut, dependencies=[can_write])
async def update_program(program_id: UUID, payload: ProgramCreate, db: AsyncSession = Depends(get_db)):
    return await program_service.update_program(db, program_id, payload)


@router.delete("/{program_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_program(program_id: UUID, db: AsyncSession = Depends(get_db)):
    await program_service.delete_program(db, program_id)
