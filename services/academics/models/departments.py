# services/academics/models/departments.py
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Department(Base):
    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)

    levels = relationship("Level", back_populates="department", passive_deletes=True)
