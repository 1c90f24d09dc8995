# shared/crud.py
"""Generic persistence helpers shared by every service module.

These mirror the ``save / findById / existsById / findAll`` contract each
entity service builds on: lookups raise ``NotFoundError`` with the entity's
display name.
"""
import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


from shared.errors import NotFoundError


async def get_or_404(db: AsyncSession, model, entity_id, resource: str):
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(resource, "id", entity_id)
    return entity


async def exists_by_id(db: AsyncSession, model, entity_id) -> bool:
    if entity_id is None:
        return False
    result = await db.execute(select(model.id).where(model.id == entity_id))
    return result.first() is not None


async def ensure_exists(db: AsyncSession, model, entity_id, resource: str):
    if not await exists_by_id(db, model, entity_id):
        raise NotFoundError(resource, "id", entity_id)


async def list_all(db: AsyncSession, stmt):
    result = await db.execute(stmt)
    return result.scalars().all()


async def count(db: AsyncSession, stmt) -> int:
    result = await db.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
    return result.scalar_one()


async def paginate(db: AsyncSession, stmt, page: int, size: int) -> dict:
    total = await count(db, stmt)
    result = await db.execute(stmt.offset(page * size).limit(size))
    return {
        "items": result.scalars().all(),
        "total": total,
        "page": page,
        "size": size,
        "pages": math.ceil(total / size) if size else 0,
    }


async def save(db: AsyncSession, entity):
    db.add(entity)
    await db.commit()
    await db.refresh(entity)
    return entity
