import logging

import fastapi
from sqlalchemy.ext.asyncio import AsyncConnection

from src.config.manager import settings
from src.repository.database import async_db
from src.repository.table import Base

logger = logging.getLogger(__name__)


async def initialize_db_tables(connection: AsyncConnection) -> None:
    logger.info("Database Table Creation --- Initializing . . .")
    # Every model module must be imported so the metadata is complete
    from src.models.db import badge, interview_history, quiz_snapshot, revision_question, user_goal, user_profile  # noqa: F401

    await connection.run_sync(Base.metadata.create_all)
    logger.info("Database Table Creation --- Successfully Initialized!")


async def initialize_db_connection(backend_app: fastapi.FastAPI) -> None:
    logger.info("Database Connection --- Establishing . . .")
    backend_app.state.db = async_db

    async with backend_app.state.db.async_engine.begin() as connection:
        if settings.IS_DB_AUTO_CREATE:
            await initialize_db_tables(connection=connection)

    logger.info("Database Connection --- Successfully Established!")


async def dispose_db_connection(backend_app: fastapi.FastAPI) -> None:
    logger.info("Database Connection --- Disposing . . .")
    await backend_app.state.db.async_engine.dispose()
    logger.info("Database Connection --- Successfully Disposed!")
