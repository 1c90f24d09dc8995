# services/user_management/api/auth_router.py
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.controllers import auth_service
from services.user_management.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
    RefreshRequest,
)
from services.user_management.schemas.users import UserCreate, UserOut
from shared.auth import get_current_user, require_permissions
from shared.db import get_db

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    client_ip = request.client.host if request.client else None
    return await auth_service.login(db, payload, client_ip)


@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permissions("user:write"))],
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await auth_service.register_user(db, payload)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.refresh(db, payload.refresh_token)


@router.post("/reset-password/request", response_model=PasswordResetResponse)
async def request_password_reset(payload: PasswordResetRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.request_password_reset(db, payload)


@router.post("/reset-password/confirm", response_model=PasswordResetResponse)
async def confirm_password_reset(payload: PasswordResetConfirm, db: AsyncSession = Depends(get_db)):
    return await auth_service.confirm_password_reset(db, payload)


@router.post("/change-password", response_model=PasswordResetResponse)
async def change_password(
    payload: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    return await auth_service.change_password(db, UUID(current_user["user_id"]), payload)


@router.get("/check", response_model=CurrentUser)
async def check(current_user: dict = Depends(get_current_user)):
    return CurrentUser(
        user_id=current_user["user_id"],
        username=current_user["username"],
        role=current_user["role"],
        permissions=sorted(current_user["permissions"]),
    )
