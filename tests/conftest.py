import os

# Settings are read at import time, so they must be in place before the app loads
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FILE"] = ""

import itertools

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from main import app
from services.academics.models.subjects import Subject
from services.user_management.models.users import User, Role
from shared.auth import get_password_hash
from shared.db import Base, get_db
from helpers import PASSWORD, auth_headers

_counter = itertools.count(1)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'schoolbase.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make_user(role: Role, **fields) -> User:
        n = next(_counter)
        values = {
            "username": f"{role.value.lower()}{n}",
            "first_name": "Test",
            "last_name": f"{role.value.capitalize()}{n}",
            "email": f"{role.value.lower()}{n}@school.ma",
            "hashed_password": get_password_hash(PASSWORD),
            "role": role,
        }
        values.update(fields)
        user = User(**values)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_subject(db):
    async def _make_subject(name=None, program_id=None) -> Subject:
        subject = Subject(name=name or f"Subject {next(_counter)}", program_id=program_id)
        db.add(subject)
        await db.commit()
        await db.refresh(subject)
        return subject

    return _make_subject


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMINISTRATOR)


@pytest.fixture
async def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
async def teacher(make_user):
    return await make_user(Role.TEACHER)


@pytest.fixture
async def subject(make_subject):
    return await make_subject("Mathematics")
