# services/user_management/controllers/auth_service.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.models.classes import Class
from services.user_management.models.users import User, Role, permissions_for
from services.user_management.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
)
from services.user_management.schemas.users import UserCreate
from shared.auth import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from shared.config import PASSWORD_RESET_TOKEN_HOURS
from shared.errors import (
    AuthenticationError,
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If your email is registered, you will receive a password reset link"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


async def _find_one(db: AsyncSession, *criteria) -> Optional[User]:
    result = await db.execute(select(User).where(*criteria))
    return result.scalars().first()


def _issue_tokens(user: User) -> AuthResponse:
    claims = {"sub": user.username, "role": user.role.value, "user_id": str(user.id)}
    return AuthResponse(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token({"sub": user.username, "user_id": str(user.id)}),
        user_id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
        permissions=sorted(permissions_for(user.role)),
    )


# --- REGISTER ---
async def register_user(db: AsyncSession, payload: UserCreate) -> User:
    if await _find_one(db, User.username == payload.username):
        raise DuplicateResourceError("User", "username", payload.username)
    if await _find_one(db, User.email == payload.email):
        raise DuplicateResourceError("User", "email", payload.email)
    if payload.cin and await _find_one(db, User.cin == payload.cin):
        raise DuplicateResourceError("User", "CIN", payload.cin)

    if payload.role != Role.STUDENT and (payload.class_id or payload.parent_id):
        raise ValidationError("Only students can be assigned a class or a parent")

    if payload.class_id is not None and await db.get(Class, payload.class_id) is None:
        raise NotFoundError("Class", "id", payload.class_id)

    if payload.parent_id is not None:
        parent = await db.get(User, payload.parent_id)
        if parent is None or parent.role != Role.PARENT:
            raise NotFoundError("Parent", "id", payload.parent_id)

    user = User(
        username=payload.username,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        cin=payload.cin,
        phone=payload.phone,
        birth_date=payload.birth_date,
        birth_place=payload.birth_place,
        address=payload.address,
        gender=payload.gender,
        photo=payload.photo,
        role=payload.role,
        class_id=payload.class_id,
        parent_id=payload.parent_id,
        enabled=True,
        locked=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered %s account %s", user.role.value, user.username)
    return user


# --- LOGIN ---
async def login(db: AsyncSession, payload: LoginRequest, client_ip: Optional[str] = None) -> AuthResponse:
    user = await _find_one(db, User.username == payload.username)
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for username %s", payload.username)
        raise AuthenticationError("Invalid username or password")

    if not user.enabled:
        raise AuthenticationError("Account is disabled")
    if user.locked:
        raise AuthenticationError("Account is locked")

    user.last_login = _utcnow()
    user.last_login_ip = client_ip
    await db.commit()

    logger.info("User %s logged in as %s", user.username, user.role.value)
    return _issue_tokens(user)


async def refresh(db: AsyncSession, refresh_token: str) -> AuthResponse:
    payload = decode_token(refresh_token)
    if not payload or payload.get("type") != REFRESH_TOKEN:
        raise AuthenticationError("Invalid refresh token")

    user = await _find_one(db, User.username == payload.get("sub"))
    if not user or str(user.id) != payload.get("user_id"):
        raise AuthenticationError("Invalid refresh token")
    if not user.enabled or user.locked:
        raise AuthenticationError("Account is disabled or locked")
    return _issue_tokens(user)


# --- PASSWORD RESET ---
async def request_password_reset(db: AsyncSession, payload: PasswordResetRequest) -> PasswordResetResponse:
    user = await _find_one(db, User.email == payload.email)
    if user is not None:
        user.reset_token = secrets.token_urlsafe(32)
        user.reset_token_expiry = _utcnow() + timedelta(hours=PASSWORD_RESET_TOKEN_HOURS)
        await db.commit()
        # Stands in for the reset email
        logger.info("Password reset requested for user %s, reset token: %s", user.username, user.reset_token)

    # Same answer either way so the endpoint doesn't reveal which emails exist
    return PasswordResetResponse(success=True, message=RESET_REQUESTED_MESSAGE)


async def confirm_password_reset(db: AsyncSession, payload: PasswordResetConfirm) -> PasswordResetResponse:
    user = await _find_one(db, User.reset_token == payload.token)
    if user is None:
        raise ValidationError("Invalid or expired reset token")
    if user.reset_token_expiry is None or user.reset_token_expiry < _utcnow():
        raise ValidationError("Reset token has expired")

    user.hashed_password = get_password_hash(payload.new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    await db.commit()

    logger.info("Password reset completed for user %s", user.username)
    return PasswordResetResponse(success=True, message="Your password has been successfully reset")


# --- CHANGE PASSWORD ---
async def change_password(db: AsyncSession, user_id, payload: ChangePasswordRequest) -> PasswordResetResponse:
    """Change the password of ``user_id``, the identity taken from the caller's token."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", "id", user_id)

    if not verify_password(payload.current_password, user.hashed_password):
        raise ValidationError("Current password is incorrect")
    if payload.new_password != payload.confirm_password:
        raise ValidationError("New password and confirm password do not match")

    user.hashed_password = get_password_hash(payload.new_password)
    await db.commit()

    logger.info("Password changed for user %s", user.username)
    return PasswordResetResponse(success=True, message="Your password has been successfully changed")
