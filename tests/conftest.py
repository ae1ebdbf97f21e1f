import os

os.environ.setdefault("JWT_SECRET", "test-secret-roadkill-signing-key-must-be-long-enough-48")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOCKOUT_MAX_FAILED_ATTEMPTS", "3")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from roadkill.api.dependencies import get_jwt_token_service
from roadkill.auth.policies import RoleNames, role_claim
from roadkill.db import get_async_session, create_schema
from roadkill.main import app


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_async_session] = _get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides = {}


def bearer(email: str, *roles: str) -> dict:
    """Authorization header for a signed token carrying the given roles."""
    token = get_jwt_token_service().create_jwt_token([role_claim(r) for r in roles], email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return bearer("admin@example.org", RoleNames.ADMIN)


@pytest.fixture
def editor_headers():
    return bearer("editor@example.org", RoleNames.EDITOR)
