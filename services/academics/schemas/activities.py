# services/academics/schemas/activities.py
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from services.academics.models.activities import ActivityType
from services.academics.schemas.validators import not_blank


class ActivityCreate(BaseModel):
    type: ActivityType
    title: str
    date: Optional[datetime] = None
    resources: Optional[str] = None
    description: Optional[str] = None
    subject_id: Optional[UUID] = None

    @field_validator("title")
    @classmethod
    def _title(cls, value):
        return not_blank(value, "Activity title")


class ActivityOut(BaseModel):
    id: UUID
    type: ActivityType
    title: str
    date: Optional[datetime] = None
    resources: Optional[str] = None
    description: Optional[str] = None
    subject_id: Optional[UUID] = None

    class Config:
        from_attributes = True
