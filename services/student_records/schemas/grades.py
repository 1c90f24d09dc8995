# services/student_records/schemas/grades.py
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GradeCreate(BaseModel):
    value: float = Field(..., ge=0, le=20)
    student_id: UUID
    activity_id: UUID


class GradeOut(BaseModel):
    id: UUID
    value: float
    student_id: UUID
    activity_id: UUID
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GradeAverage(BaseModel):
    average: Optional[float] = None
