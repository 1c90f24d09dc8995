# services/user_management/models/users.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, Date, Boolean, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class Role(str, enum.Enum):
    ADMINISTRATOR = "ADMINISTRATOR"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


def _crud(resource, *actions):
    return {f"{resource}:{action}" for action in actions}


ROLE_PERMISSIONS = {
    Role.ADMINISTRATOR: frozenset(
        _crud("user", "read", "write", "delete")
        | _crud("class", "read", "write", "delete")
        | _crud("course", "read", "write", "delete")
        | _crud("grade", "read", "write", "delete")
        | _crud("attendance", "read", "write", "delete")
        | _crud("schedule", "read", "write", "delete")
        | _crud("report", "read", "write")
        | {"system:configure"}
    ),
    Role.TEACHER: frozenset(
        {"class:read", "student:read", "schedule:read", "announcement:write"}
        | _crud("course", "read", "write")
        | _crud("grade", "read", "write")
        | _crud("attendance", "read", "write")
        | _crud("report", "read", "write")
    ),
    Role.STUDENT: frozenset(
        {"course:read", "grade:read", "attendance:read", "schedule:read", "announcement:read"}
        | _crud("assignment", "read", "submit")
    ),
    Role.PARENT: frozenset(
        {"student:read", "grade:read", "attendance:read", "schedule:read", "announcement:read", "teacher:contact"}
    ),
}


def permissions_for(role: Role) -> frozenset:
    return ROLE_PERMISSIONS[Role(role)]


class User(Base):
    """One account record; ``role`` is the variant tag.

    ``class_id`` and ``parent_id`` only carry values for students. Teachers'
    sessions hang off ``Session.teacher_id``.
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    cin = Column(String(8), unique=True, nullable=True)
    phone = Column(String(10), nullable=True)
    birth_date = Column(Date, nullable=True)
    birth_place = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    gender = Column(Enum(Gender), nullable=True)
    photo = Column(String, nullable=True)
    role = Column(Enum(Role), nullable=False)

    # Student-only fields
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    parent_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    enabled = Column(Boolean, default=True, nullable=False)
    locked = Column(Boolean, default=False, nullable=False)
    reset_token = Column(String, nullable=True, unique=True)
    reset_token_expiry = Column(DateTime, nullable=True)
    last_login = Column(DateTime, nullable=True)
    last_login_ip = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student_class = relationship("Class", back_populates="students", foreign_keys=[class_id])
    parent = relationship("User", remote_side=[id], foreign_keys=[parent_id])
    sessions = relationship("Session", back_populates="teacher", passive_deletes=True)

    __table_args__ = (
        Index("idx_user_role", "role"),
        Index("idx_user_class_role", "class_id", "role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def permissions(self) -> frozenset:
        return permissions_for(self.role)
