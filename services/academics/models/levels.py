# services/academics/models/levels.py
from sqlalchemy import Column, String, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Level(Base):
    __tablename__ = "levels"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)

    # Name uniqueness (per department, or global without one) is enforced in level_service
    __table_args__ = (
        Index("ix_level_department_name", "department_id", "name"),
    )

    department = relationship("Department", back_populates="levels")
    classes = relationship("Class", back_populates="level", passive_deletes=True)
