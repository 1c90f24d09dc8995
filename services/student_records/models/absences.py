# services/student_records/models/absences.py
from sqlalchemy import Column, Date, Boolean, String, Text, Enum, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from shared.db import Base
import enum
import uuid


class AbsenceStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Absence(Base):
    __tablename__ = "absences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False)
    justified = Column(Boolean, default=False, nullable=False)
    remark = Column(String(255), nullable=True)
    status = Column(Enum(AbsenceStatus), default=AbsenceStatus.PENDING, nullable=False)
    justification = Column(Text, nullable=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_absence_student_date", "student_id", "date"),
        Index("ix_absence_status", "status"),
    )
