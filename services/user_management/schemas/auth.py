# services/user_management/schemas/auth.py
from typing import List
from uuid import UUID

from pydantic import BaseModel, EmailStr, field_validator

from services.user_management.models.users import Role
from services.user_management.schemas.users import check_password_policy


class LoginRequest(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: UUID
    username: str
    full_name: str
    role: Role
    permissions: List[str]


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password(cls, value):
        return check_password_policy(value)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def _password(cls, value):
        return check_password_policy(value)


class PasswordResetResponse(BaseModel):
    success: bool
    message: str


class CurrentUser(BaseModel):
    user_id: UUID
    username: str
    role: Role
    permissions: List[str]
