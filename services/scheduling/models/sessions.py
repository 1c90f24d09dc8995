# services/scheduling/models/sessions.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Session(Base):
    """A teacher's booked slot ``[start_time, end_time)`` for one subject.

    Times are stored as naive UTC.
    """

    __tablename__ = "sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_session_teacher_time", "teacher_id", "start_time", "end_time"),
        Index("ix_session_subject_id", "subject_id"),
    )

    teacher = relationship("User", back_populates="sessions")
    subject = relationship("Subject", back_populates="sessions")
