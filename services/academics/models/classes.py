# services/academics/models/classes.py
from sqlalchemy import Column, String, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Class(Base):
    __tablename__ = "classes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)   # E.g., "2BAC-SM-1"
    level_id = Column(Uuid(as_uuid=True), ForeignKey("levels.id", ondelete="SET NULL"), nullable=True)
    program_id = Column(Uuid(as_uuid=True), ForeignKey("programs.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        Index("ix_class_level_id", "level_id"),
        Index("ix_class_program_id", "program_id"),
    )

    level = relationship("Level", back_populates="classes")
    program = relationship("Program", back_populates="classes")
    students = relationship("User", back_populates="student_class", foreign_keys="User.class_id", passive_deletes=True)
