import os

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import Base + all models so metadata is complete
from vendorhub.models.base import Base
from vendorhub.models.form_schema_version import FormSchemaVersion  # noqa: F401
from vendorhub.models.vendor import Vendor  # noqa: F401
from vendorhub.models.edit_request import EditRequest  # noqa: F401
from vendorhub.models.audit_log import AuditLog  # noqa: F401
from vendorhub.models.agent import Agent  # noqa: F401

from vendorhub.core.config import settings
from vendorhub.core.db import get_db
from vendorhub.main import app


def _test_db_url() -> str:
    # Postgres when provided, otherwise a throwaway in-memory SQLite
    return os.getenv("DATABASE_URL_TEST", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def async_engine():
    url = _test_db_url()
    if url.startswith("sqlite"):
        engine = create_async_engine(url, poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        engine = create_async_engine(url, pool_pre_ping=True)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """
    HTTP client backed by the test database; every request gets its own
    session, like get_db does in production.
    """
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Internal-Admin-Key": settings.internal_admin_key, "X-Admin-Actor": "adm_test"}
