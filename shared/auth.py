# shared/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    REFRESH_TOKEN_EXPIRE_MINUTES,
    SECRET_KEY,
)
from services.user_management.models.users import User, Role, permissions_for
from shared.db import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    return _encode(data, ACCESS_TOKEN, expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None):
    return _encode(data, REFRESH_TOKEN, expires_delta or timedelta(minutes=REFRESH_TOKEN_EXPIRE_MINUTES))


def decode_token(token: str):
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)):
    payload = decode_token(token)
    if not payload or payload.get("type") != ACCESS_TOKEN:
        raise _unauthorized("Invalid authentication credentials")

    user_id: str = payload.get("user_id")
    username: str = payload.get("sub")

    if not user_id or not username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token is missing required fields"
        )

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid authentication credentials")

    # Tokens of accounts that are no longer active stop working at once
    user = await db.get(User, user_uuid)
    if user is None or user.username != username:
        raise _unauthorized("Account no longer exists")
    if not user.enabled or user.locked:
        raise _unauthorized("Account is disabled or locked")

    # Role and permissions come from the stored account, never from the token
    return {
        "user_id": str(user.id),
        "username": user.username,
        "role": user.role,
        "permissions": permissions_for(user.role),
    }


def require_permissions(*permissions: str):
    """Dependency factory: the caller's role must grant every listed permission."""

    def checker(current_user: dict = Depends(get_current_user)):
        missing = [p for p in permissions if p not in current_user["permissions"]]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to perform this action",
            )
        return current_user

    return checker


def require_role(*roles: Role):
    def checker(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to perform this action",
            )
        return current_user

    return checker
