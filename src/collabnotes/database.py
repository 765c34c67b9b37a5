# Database connection setup
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings
from .core.models import BaseModel  # registers every model on the metadata

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=settings.database_echo)

# expire_on_commit=False keeps loaded notes usable after commit without implicit IO
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session():
    """Get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables():
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
