# services/student_records/schemas/absences.py
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from services.student_records.models.absences import AbsenceStatus


class AbsenceCreate(BaseModel):
    date: date
    student_id: UUID
    justified: bool = False
    remark: Optional[str] = None
    status: AbsenceStatus = AbsenceStatus.PENDING
    justification: Optional[str] = None


class AbsenceOut(BaseModel):
    id: UUID
    date: date
    student_id: UUID
    justified: bool
    remark: Optional[str] = None
    status: AbsenceStatus
    justification: Optional[str] = None

    class Config:
        from_attributes = True


class JustificationRequest(BaseModel):
    justification: str


class StatusUpdate(BaseModel):
    status: AbsenceStatus


class StudentAbsenceStatistics(BaseModel):
    student_id: UUID
    student_name: str
    total_absences: int
    justified_absences: int
    unjustified_absences: int
    justified_percentage: float
    unjustified_percentage: float
    absences_by_status: Dict[str, int]


class AbsentStudent(BaseModel):
    student_id: UUID
    student_name: str
    absences: int


class ClassAbsenceStatistics(BaseModel):
    class_id: UUID
    class_name: str
    total_students: int
    total_absences: int
    average_absences_per_student: float
    absences_by_status: Dict[str, int]
    top_absent_students: List[AbsentStudent]
