# services/user_management/api/admin_user_router.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.controllers import auth_service, user_service
from services.user_management.models.users import Role
from services.user_management.schemas.users import (
    PasswordUpdate,
    UserCreate,
    UserOut,
    UserStatistics,
    UserStatusUpdate,
)
from shared.auth import require_role
from shared.db import get_db
from shared.pagination import Page, PageParams

router = APIRouter(
    prefix="/api/admin/users",
    tags=["Admin Users"],
    dependencies=[Depends(require_role(Role.ADMINISTRATOR))],
)


@router.get("", response_model=Page[UserOut])
async def list_users(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await user_service.list_users(db, params.page, params.size)


@router.get("/search", response_model=Page[UserOut])
async def search_users(
    query: str = Query(..., min_length=1),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db)
):
    return await user_service.search_users_by_name(db, query, params.page, params.size)


@router.get("/by-role/{role}", response_model=Page[UserOut])
async def users_by_role(role: Role, params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    return await user_service.list_users_by_role(db, role, params.page, params.size)


@router.get("/statistics", response_model=UserStatistics)
async def user_statistics(db: AsyncSession = Depends(get_db)):
    return await user_service.get_user_statistics(db)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user(db, user_id)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await auth_service.register_user(db, payload)


@router.put("/{user_id}/status", response_model=UserOut)
async def update_status(user_id: UUID, payload: UserStatusUpdate, db: AsyncSession = Depends(get_db)):
    return await user_service.update_user_status(db, user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    await user_service.delete_user(db, user_id)


@router.post("/{user_id}/reset-password")
async def reset_password(user_id: UUID, payload: PasswordUpdate, db: AsyncSession = Depends(get_db)):
    message = await user_service.reset_user_password(db, user_id, payload)
    return {"message": message}
