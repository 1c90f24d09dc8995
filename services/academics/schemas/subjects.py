# services/academics/schemas/subjects.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.schemas.validators import not_blank


class SubjectCreate(BaseModel):
    name: str
    program_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _name(cls, value):
        return not_blank(value, "Subject name")


class SubjectOut(BaseModel):
    id: UUID
    name: str
    program_id: Optional[UUID] = None

    class Config:
        from_attributes = True
