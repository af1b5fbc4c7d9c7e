from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.config import settings
from src.core.logging import get_logger

log = get_logger("database")

if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is not set")

log.info(
    "Connecting to %s", make_url(settings.database_url).render_as_string(hide_password=True)
)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug and not settings.is_production,
    pool_pre_ping=True,
)

# Objects stay usable after commit; services re-fetch what they return
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Commits when the endpoint returns, rolls back if it raises. A ledger
    update that lost its version claim midway is undone here.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
