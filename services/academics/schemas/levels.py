# services/academics/schemas/levels.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.schemas.validators import not_blank


class LevelCreate(BaseModel):
    name: str
    department_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _name(cls, value):
        return not_blank(value, "Level name")


class LevelOut(BaseModel):
    id: UUID
    name: str
    department_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class LevelHierarchy(BaseModel):
    level_id: UUID
    path: str
