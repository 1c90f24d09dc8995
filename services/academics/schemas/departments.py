# services/academics/schemas/departments.py
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.schemas.validators import not_blank


class DepartmentCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _name(cls, value):
        return not_blank(value, "Department name")


class DepartmentOut(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True
