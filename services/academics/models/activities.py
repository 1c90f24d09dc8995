# services/academics/models/activities.py
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class ActivityType(str, enum.Enum):
    EXAM = "EXAM"
    QUIZ = "QUIZ"
    HOMEWORK = "HOMEWORK"
    PROJECT = "PROJECT"
    PRESENTATION = "PRESENTATION"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(Enum(ActivityType), nullable=False)
    title = Column(String(200), nullable=False)
    date = Column(DateTime, nullable=True)
    resources = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        Index("ix_activity_subject_id", "subject_id"),
        Index("ix_activity_date", "date"),
    )

    subject = relationship("Subject", back_populates="activities")
    grades = relationship("Grade", back_populates="activity", passive_deletes=True)
