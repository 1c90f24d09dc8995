# services/academics/models/programs.py
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Program(Base):
    """Groups classes with the subjects they follow.

    The association is owned by ``Class.program_id`` and ``Subject.program_id``;
    the two collections below are read-only views of those foreign keys.
    """

    __tablename__ = "programs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    description = Column(String(255), nullable=False)

    classes = relationship("Class", back_populates="program", viewonly=True, order_by="Class.name")
    subjects = relationship("Subject", back_populates="program", viewonly=True, order_by="Subject.name")
