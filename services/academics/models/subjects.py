# services/academics/models/subjects.py
from sqlalchemy import Column, String, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)  # e.g., "Math", "Physics"
    program_id = Column(Uuid(as_uuid=True), ForeignKey("programs.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        Index("ix_subject_program_id", "program_id"),
    )

    program = relationship("Program", back_populates="subjects")
    activities = relationship("Activity", back_populates="subject", passive_deletes=True)
    sessions = relationship("Session", back_populates="subject", passive_deletes=True)
