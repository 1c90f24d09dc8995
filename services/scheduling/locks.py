# services/scheduling/locks.py
"""Serialises scheduling decisions per teacher.

Each create or update for a teacher reads the teacher's sessions and then
writes one; two such decisions must never interleave. Inside one process an
``asyncio.Lock`` keyed by teacher id orders them, and on PostgreSQL a
transaction-scoped advisory lock extends the guarantee across workers. Both
are held until the caller commits or rolls back inside the ``async with``.
"""
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_teacher_locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def _local_lock(teacher_id: UUID) -> asyncio.Lock:
    lock = _teacher_locks.get(teacher_id)
    if lock is None:
        lock = asyncio.Lock()
        _teacher_locks[teacher_id] = lock
    return lock


def advisory_key(teacher_id: UUID) -> int:
    """Signed 64-bit key for ``pg_advisory_xact_lock``."""
    return int.from_bytes(teacher_id.bytes[:8], "big", signed=True)


@asynccontextmanager
async def teacher_schedule_lock(db: AsyncSession, teacher_id: UUID):
    lock = _local_lock(teacher_id)
    async with lock:
        if db.get_bind().dialect.name == "postgresql":
            await db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": advisory_key(teacher_id)})
        try:
            yield
        except Exception:
            await db.rollback()
            raise
