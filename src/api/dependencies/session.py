import logging
import typing

from sqlalchemy.ext.asyncio import AsyncSession as SQLAlchemyAsyncSession

from src.repository.database import async_db

logger = logging.getLogger(__name__)


async def get_async_session() -> typing.AsyncGenerator[SQLAlchemyAsyncSession, None]:
    """
    Dependency that provides a database session for each request.
    Each request gets its own session instance for better concurrency.
    """
    session = async_db.get_session()
    try:
        yield session
    except Exception:
        logger.exception("Database session error")
        await session.rollback()
        raise
    finally:
        await session.close()
