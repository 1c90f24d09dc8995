# services/academics/schemas/programs.py
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.schemas.classes import ClassOut
from services.academics.schemas.subjects import SubjectOut
from services.academics.schemas.validators import not_blank


class ProgramCreate(BaseModel):
    description: str

    @field_validator("description")
    @classmethod
    def _description(cls, value):
        return not_blank(value, "Program description")


class ProgramOut(BaseModel):
    id: UUID
    description: str

    class Config:
        from_attributes = True


class ProgramDetailOut(ProgramOut):
    classes: List[ClassOut] = []
    subjects: List[SubjectOut] = []


class ClassSubjectLink(BaseModel):
    class_id: UUID
    subject_id: UUID
    description: Optional[str] = None


class ClassProgramStatistics(BaseModel):
    class_id: UUID
    class_name: str
    program_id: Optional[UUID] = None
    program_description: Optional[str] = None
    subject_count: int
    subjects: List[str]


class SubjectProgramStatistics(BaseModel):
    subject_id: UUID
    subject_name: str
    program_id: Optional[UUID] = None
    program_description: Optional[str] = None
    class_count: int
    classes: List[str]
