import os

# Point the settings at SQLite before any pingpanel module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite://")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from pingpanel.core.database import get_db
from pingpanel.main import app
from pingpanel.models import Base, Event, EventCategory, User


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pingpanel.db'}",
        poolclass=NullPool
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user(db):
    user = User(external_id="idp_user_1", email="owner@example.com", api_key="test-api-key")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def other_user(db):
    user = User(external_id="idp_user_2", email="other@example.com", api_key="other-api-key")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def sale_category(db, user):
    category = EventCategory(name="sale", color=0xffeb3b, emoji="\U0001f4b0", user_id=user.id)
    db.add(category)
    await db.commit()
    return category


@pytest.fixture
def api_headers():
    return {"Authorization": "Bearer test-api-key"}


@pytest.fixture
def identity_headers():
    return {"X-Forwarded-User": "idp_user_1", "X-Forwarded-Email": "owner@example.com"}


@pytest.fixture
def add_events(db):
    """Insert (created_at, fields) events straight into a category"""
    async def _add(category, *rows):
        events = [
            Event(
                name=category.name,
                formatted_message=f"{category.name} event",
                fields=fields,
                user_id=category.user_id,
                event_category_id=category.id,
                created_at=created_at,
                updated_at=created_at
            )
            for created_at, fields in rows
        ]
        db.add_all(events)
        await db.commit()
        return events

    return _add
