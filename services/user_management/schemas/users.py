# services/user_management/schemas/users.py
import re
from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from services.user_management.models.users import Gender, Role
from shared.config import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)

CIN_PATTERN = re.compile(r"^[A-Za-z]{2}\d{6}$")
PHONE_PATTERN = re.compile(r"^(06|07|05)\d{8}$")


def check_password_policy(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"The password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        raise ValueError("The password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("The password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        raise ValueError("The password must contain at least one digit")
    return password


def _check_length(value: str, label: str, minimum: int, maximum: int) -> str:
    if not minimum <= len(value) <= maximum:
        raise ValueError(f"The {label} must be between {minimum} and {maximum} characters")
    return value


class UserCreate(BaseModel):
    username: str
    first_name: str
    last_name: str
    email: EmailStr
    password: str
    role: Role
    cin: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    birth_place: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[Gender] = None
    photo: Optional[str] = None
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None

    @field_validator("username")
    @classmethod
    def _username(cls, value):
        return _check_length(value.strip(), "username", USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH)

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, value, info):
        label = info.field_name.replace("_", " ")
        return _check_length(value.strip(), label, NAME_MIN_LENGTH, NAME_MAX_LENGTH)

    @field_validator("password")
    @classmethod
    def _password(cls, value):
        return check_password_policy(value)

    @field_validator("cin")
    @classmethod
    def _cin(cls, value):
        if value is not None and not CIN_PATTERN.match(value):
            raise ValueError("CIN must start with 2 letters followed by 6 digits (e.g., AB123456)")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value):
        if value is not None and not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must start with 06, 07, or 05 followed by 8 digits")
        return value

    @field_validator("birth_date")
    @classmethod
    def _birth_date(cls, value):
        if value is not None and value >= date.today():
            raise ValueError("Birth date must be in the past")
        return value


class UserOut(BaseModel):
    id: UUID
    username: str
    first_name: str
    last_name: str
    email: EmailStr
    cin: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    birth_place: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[Gender] = None
    photo: Optional[str] = None
    role: Role
    enabled: bool
    locked: bool
    last_login: Optional[datetime] = None
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class UserStatusUpdate(BaseModel):
    enabled: bool
    locked: bool
    reason_for_change: Optional[str] = None


class PasswordUpdate(BaseModel):
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password(cls, value):
        return check_password_policy(value)


class UserStatistics(BaseModel):
    total_users: int
    active_users: int
    locked_users: int
    disabled_users: int
    users_by_role: Dict[str, int]
    never_logged_in_users: int
