# services/student_records/api/grade_router.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.student_records.controllers import grade_service
from services.student_records.schemas.grades import GradeAverage, GradeCreate, GradeOut
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/grades", tags=["Grades"])

can_read = Depends(require_permissions("grade:read"))
can_write = Depends(require_permissions("grade:write"))
can_delete = Depends(require_permissions("grade:delete"))


@router.post("", response_model=GradeOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_grade(payload: GradeCreate, db: AsyncSession = Depends(get_db)):
    return await grade_service.create_grade(db, payload)


@router.get("", response_model=Page[GradeOut], dependencies=[can_read])
async def list_grades(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await grade_service.list_grades(db, params.page, params.size)


@router.get("/all", response_model=List[GradeOut], dependencies=[can_read])
async def all_grades(db: AsyncSession = Depends(get_db)):
    return await grade_service.list_all_grades(db)


@router.get("/student/{student_id}", response_model=List[GradeOut], dependencies=[can_read])
async def grades_by_student(student_id: UUID, db: AsyncSession = Depends(get_db)):
    return await grade_service.find_by_student(db, student_id)


@router.get("/student/{student_id}/average", response_model=GradeAverage, dependencies=[can_read])
async def student_average(student_id: UUID, db: AsyncSession = Depends(get_db)):
    return GradeAverage(average=await grade_service.student_average(db, student_id))


@router.delete("/student/{student_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_student_grades(student_id: UUID, db: AsyncSession = Depends(get_db)):
    await grade_service.delete_by_student(db, student_id)


@router.get("/activity/{activity_id}", response_model=List[GradeOut], dependencies=[can_read])
async def grades_by_activity(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    return await grade_service.find_by_activity(db, activity_id)


@router.get("/activity/{activity_id}/average", response_model=GradeAverage, dependencies=[can_read])
async def activity_average(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    return GradeAverage(average=await grade_service.activity_average(db, activity_id))


@router.delete("/activity/{activity_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_activity_grades(activity_id: UUID, db: AsyncSession = Depends(get_db)):
    await grade_service.delete_by_activity(db, activity_id)


@router.get("/{grade_id}", response_model=GradeOut, dependencies=[can_read])
async def get_grade(grade_id: UUID, db: AsyncSession = Depends(get_db)):
    return await grade_service.get_grade(db, grade_id)


@router.get("/{grade_id}/exists", dependencies=[can_read])
async def grade_exists(grade_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await grade_service.grade_exists(db, grade_id)}


@router.put("/{grade_id}", response_model=GradeOut, dependencies=[can_write])
async def update_grade(grade_id: UUID, payload: GradeCreate, db: AsyncSession = Depends(get_db)):
    return await grade_service.update_grade(db, grade_id, payload)


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_grade(grade_id: UUID, db: AsyncSession = Depends(get_db)):
    await grade_service.delete_grade(db, grade_id)
