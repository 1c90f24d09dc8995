# services/academics/schemas/classes.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.schemas.validators import not_blank


class ClassCreate(BaseModel):
    name: str
    level_id: Optional[UUID] = None
    program_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _name(cls, value):
        return not_blank(value, "Class name")


class ClassOut(BaseModel):
    id: UUID
    name: str
    level_id: Optional[UUID] = None
    program_id: Optional[UUID] = None

    class Config:
        from_attributes = True
