# services/student_records/models/grades.py
from sqlalchemy import Column, Float, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    value = Column(Float, nullable=False)  # out of 20
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    activity_id = Column(Uuid(as_uuid=True), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_grade_student_id", "student_id"),
        Index("ix_grade_activity_id", "activity_id"),
    )

    activity = relationship("Activity", back_populates="grades")
