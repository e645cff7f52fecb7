"""
Database connection using SQLAlchemy's async engine.

Production runs against PostgreSQL through asyncpg; local development and
tests use SQLite through aiosqlite. Only the DATABASE_URL changes.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from claimcheck.config import get_settings

settings = get_settings()

engine = create_async_engine(settings.database_url)

# expire_on_commit=False keeps objects usable after commit (needed for async)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """Dependency that yields a database session."""
    async with async_session() as session:
        yield session
