# services/student_records/api/absence_router.py
import os
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTask

from services.student_records.controllers import absence_report, absence_service
from services.student_records.models.absences import AbsenceStatus
from services.student_records.schemas.absences import (
    AbsenceCreate,
    AbsenceOut,
    ClassAbsenceStatistics,
    JustificationRequest,
    StatusUpdate,
    StudentAbsenceStatistics,
)
from shared.auth import require_permissions
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(prefix="/api/absences", tags=["Absences"])

can_read = Depends(require_permissions("attendance:read"))
can_write = Depends(require_permissions("attendance:write"))
can_delete = Depends(require_permissions("attendance:delete"))

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("", response_model=AbsenceOut, status_code=status.HTTP_201_CREATED, dependencies=[can_write])
async def create_absence(payload: AbsenceCreate, db: AsyncSession = Depends(get_db)):
    return await absence_service.create_absence(db, payload)


@router.get("", response_model=Page[AbsenceOut], dependencies=[can_read])
async def list_absences(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await absence_service.list_absences(db, params.page, params.size)


@router.get("/all", response_model=List[AbsenceOut], dependencies=[can_read])
async def all_absences(db: AsyncSession = Depends(get_db)):
    return await absence_service.list_all_absences(db)


@router.get("/justified", response_model=List[AbsenceOut], dependencies=[can_read])
async def justified_absences(db: AsyncSession = Depends(get_db)):
    return await absence_service.list_justified(db, True)


@router.get("/unjustified", response_model=List[AbsenceOut], dependencies=[can_read])
async def unjustified_absences(db: AsyncSession = Depends(get_db)):
    return await absence_service.list_justified(db, False)


@router.get("/date-range", response_model=List[AbsenceOut], dependencies=[can_read])
async def absences_in_range(
    start: date = Query(...),
    end: date = Query(...),
    student_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db)
):
    return await absence_service.find_by_date_range(db, start, end, student_id)


@router.get("/status/{absence_status}", response_model=List[AbsenceOut], dependencies=[can_read])
async def absences_by_status(
    absence_status: AbsenceStatus,
    student_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db)
):
    if student_id is not None:
        return await absence_service.find_by_status_and_student(db, absence_status, student_id)
    return await absence_service.find_by_status(db, absence_status)


# --- PER STUDENT ---
@router.get("/student/{student_id}", response_model=List[AbsenceOut], dependencies=[can_read])
async def absences_by_student(student_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.find_by_student(db, student_id)


@router.get("/student/{student_id}/count", dependencies=[can_read])
async def count_student_absences(student_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await absence_service.count_by_student(db, student_id)}


@router.get("/student/{student_id}/statistics", response_model=StudentAbsenceStatistics, dependencies=[can_read])
async def student_statistics(student_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.student_statistics(db, student_id)


@router.delete("/student/{student_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_student_absences(student_id: UUID, db: AsyncSession = Depends(get_db)):
    await absence_service.delete_by_student(db, student_id)


# --- PER CLASS ---
@router.get("/class/{class_id}", response_model=List[AbsenceOut], dependencies=[can_read])
async def absences_by_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.find_by_class(db, class_id)


@router.get("/class/{class_id}/count", dependencies=[can_read])
async def count_class_absences(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"count": await absence_service.count_by_class(db, class_id)}


@router.get("/class/{class_id}/statistics", response_model=ClassAbsenceStatistics, dependencies=[can_read])
async def class_statistics(class_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.class_statistics(db, class_id)


@router.get(
    "/class/{class_id}/export-excel",
    dependencies=[Depends(require_permissions("attendance:read", "report:read"))],
)
async def export_absences_excel(
    class_id: UUID,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
):
    path = await absence_report.export_absences_excel(db, class_id, from_date, to_date)
    return FileResponse(
        path,
        filename="absence_report.xlsx",
        media_type=XLSX_MEDIA_TYPE,
        background=BackgroundTask(os.remove, path),
    )


# --- SINGLE ABSENCE ---
@router.get("/{absence_id}", response_model=AbsenceOut, dependencies=[can_read])
async def get_absence(absence_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.get_absence(db, absence_id)


@router.get("/{absence_id}/exists", dependencies=[can_read])
async def absence_exists(absence_id: UUID, db: AsyncSession = Depends(get_db)):
    return {"exists": await absence_service.absence_exists(db, absence_id)}


@router.put("/{absence_id}", response_model=AbsenceOut, dependencies=[can_write])
async def update_absence(absence_id: UUID, payload: AbsenceCreate, db: AsyncSession = Depends(get_db)):
    return await absence_service.update_absence(db, absence_id, payload)


@router.put("/{absence_id}/justify", response_model=AbsenceOut, dependencies=[can_write])
async def justify_absence(absence_id: UUID, payload: JustificationRequest, db: AsyncSession = Depends(get_db)):
    return await absence_service.justify_absence(db, absence_id, payload.justification)


@router.put("/{absence_id}/unjustify", response_model=AbsenceOut, dependencies=[can_write])
async def mark_unjustified(absence_id: UUID, db: AsyncSession = Depends(get_db)):
    return await absence_service.mark_unjustified(db, absence_id)


@router.put("/{absence_id}/status", response_model=AbsenceOut, dependencies=[can_write])
async def change_status(absence_id: UUID, payload: StatusUpdate, db: AsyncSession = Depends(get_db)):
    return await absence_service.change_status(db, absence_id, payload.status)


@router.delete("/{absence_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_delete])
async def delete_absence(absence_id: UUID, db: AsyncSession = Depends(get_db)):
    await absence_service.delete_absence(db, absence_id)
