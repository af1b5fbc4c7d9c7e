from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.auth.models import UserRole
from src.core.auth.service import AuthService
from src.core.database import get_db
from src.main import app
from src.models import metadata

# One shared in-memory connection, so every session sees the same tables
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
)
TestSession = async_sessionmaker(test_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture(autouse=True)
async def setup_database():
    """Fresh schema for every test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TestSession() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """API client whose requests run on ``db_session``."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(
    db_session: AsyncSession,
) -> Callable[[UserRole], Awaitable[dict[str, str]]]:
    """Factory: create a staff user with the given role and return its bearer header."""

    async def make(role: UserRole = UserRole.ADMIN) -> dict[str, str]:
        service = AuthService(db_session)
        email = f"{role.value.lower()}@school.in"
        await service.create_user(
            email=email, password="Password123", full_name=f"{role.value} Staff", role=role
        )
        await db_session.commit()
        _, access_token, _ = await service.authenticate(email, "Password123")
        return {"Authorization": f"Bearer {access_token}"}

    return make
