import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from app.config.settings import settings
from app.infrastructure.database.models import Base

logger = logging.getLogger("uvicorn.error")

# SQLite connections are cheap and must not outlive the event loop that opened them
_engine_kwargs = {"poolclass": NullPool} if settings.is_sqlite else {"pool_pre_ping": True}

# Create async engine
engine = create_async_engine(settings.database_url, echo=settings.DATABASE_ECHO, future=True, **_engine_kwargs)

# Create session factory
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


# Dependency for FastAPI routes
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


# Create tables and check the connection
async def init_db():
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise
