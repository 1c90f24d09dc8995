# services/user_management/controllers/user_service.py
import logging

from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.scheduling.models.sessions import Session
from services.student_records.models.absences import Absence
from services.student_records.models.grades import Grade
from services.user_management.models.users import User, Role
from services.user_management.schemas.users import PasswordUpdate, UserStatistics, UserStatusUpdate
from shared.auth import get_password_hash
from shared.crud import count, get_or_404, paginate
from shared.errors import NotFoundError, OperationNotAllowedError, ValidationError

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(User).order_by(User.last_name, User.first_name), page, size)


async def get_user(db: AsyncSession, user_id) -> User:
    return await get_or_404(db, User, user_id, "User")


async def update_user_status(db: AsyncSession, user_id, payload: UserStatusUpdate) -> User:
    user = await get_or_404(db, User, user_id, "User")
    user.enabled = payload.enabled
    user.locked = payload.locked
    await db.commit()
    await db.refresh(user)

    if not payload.enabled:
        status_message = "disabled"
    elif payload.locked:
        status_message = "locked"
    else:
        status_message = "updated"
    logger.info("Account %s %s (reason: %s)", user.username, status_message, payload.reason_for_change)
    return user


async def delete_user(db: AsyncSession, user_id):
    user = await get_or_404(db, User, user_id, "User")

    if user.role == Role.ADMINISTRATOR:
        admins = await count(db, select(User).where(User.role == Role.ADMINISTRATOR))
        if admins <= 1:
            raise OperationNotAllowedError("Cannot delete the last administrator")

    # Rows that reference the account go with it
    if user.role == Role.TEACHER:
        await db.execute(delete(Session).where(Session.teacher_id == user.id))
    elif user.role == Role.STUDENT:
        await db.execute(delete(Grade).where(Grade.student_id == user.id))
        await db.execute(delete(Absence).where(Absence.student_id == user.id))
    elif user.role == Role.PARENT:
        await db.execute(update(User).where(User.parent_id == user.id).values(parent_id=None))

    await db.delete(user)
    await db.commit()
    logger.info("Deleted %s account %s", user.role.value, user.username)


async def search_users_by_name(db: AsyncSession, query: str, page: int, size: int) -> dict:
    term = (query or "").strip()
    if not term:
        raise ValidationError("Search term cannot be empty")
    pattern = f"%{term.lower()}%"
    stmt = (
        select(User)
        .where(
            or_(
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
                func.lower(User.username).like(pattern),
            )
        )
        .order_by(User.last_name, User.first_name)
    )
    return await paginate(db, stmt, page, size)


async def list_users_by_role(db: AsyncSession, role: Role, page: int, size: int) -> dict:
    stmt = select(User).where(User.role == role).order_by(User.last_name, User.first_name)
    return await paginate(db, stmt, page, size)


async def reset_user_password(db: AsyncSession, user_id, payload: PasswordUpdate) -> str:
    user = await get_or_404(db, User, user_id, "User")
    user.hashed_password = get_password_hash(payload.new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    await db.commit()
    logger.info("Password reset by an administrator for user %s", user.username)
    return "Password has been successfully reset"


async def get_user_statistics(db: AsyncSession) -> UserStatistics:
    total = await count(db, select(User))
    active = await count(db, select(User).where(User.enabled.is_(True), User.locked.is_(False)))
    locked = await count(db, select(User).where(User.locked.is_(True)))
    disabled = await count(db, select(User).where(User.enabled.is_(False)))
    never_logged_in = await count(db, select(User).where(User.last_login.is_(None)))

    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    by_role = {role.value: 0 for role in Role}
    for role, role_count in result.all():
        by_role[Role(role).value] = role_count

    return UserStatistics(
        total_users=total,
        active_users=active,
        locked_users=locked,
        disabled_users=disabled,
        users_by_role=by_role,
        never_logged_in_users=never_logged_in,
    )


async def get_user_with_role(db: AsyncSession, user_id, role: Role) -> User:
    """Load an account that must carry ``role``; anything else reads as not found."""
    user = await db.get(User, user_id) if user_id is not None else None
    if user is None or user.role != role:
        raise NotFoundError(role.value.capitalize(), "id", user_id)
    return user
