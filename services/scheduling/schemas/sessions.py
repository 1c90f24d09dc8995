# services/scheduling/schemas/sessions.py
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel


class SessionCreate(BaseModel):
    # Presence is checked by the session service so that a missing field is a
    # validation error like any other scheduling rule
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    teacher_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None


class SessionOut(BaseModel):
    id: UUID
    start_time: datetime
    end_time: datetime
    teacher_id: UUID
    subject_id: UUID

    class Config:
        from_attributes = True


class ScheduleCheck(BaseModel):
    teacher_id: UUID
    start_time: datetime
    end_time: datetime
    can_schedule: bool


class TeacherHours(BaseModel):
    teacher_id: UUID
    total_hours: float


class SessionStatistics(BaseModel):
    total_sessions: int
    total_hours: float
    sessions_by_subject: Dict[str, int]
    sessions_by_teacher: Dict[str, int]
    average_session_duration: float


class TeacherSessionStatistics(BaseModel):
    teacher_id: UUID
    teacher_name: str
    total_sessions: int
    total_hours: float
    sessions_by_subject: Dict[str, int]
    hours_by_subject: Dict[str, float]
    average_session_duration: float
