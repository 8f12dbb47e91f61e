from sqlalchemy.ext.asyncio import (
    async_sessionmaker as sqlalchemy_async_sessionmaker,
    AsyncEngine as SQLAlchemyAsyncEngine,
    AsyncSession as SQLAlchemyAsyncSession,
    create_async_engine as create_sqlalchemy_async_engine,
)
from sqlalchemy.pool import Pool as SQLAlchemyPool

from src.config.manager import settings


class AsyncDatabase:
    def __init__(self, url: str | None = None):
        self.url = url or settings.DATABASE_URL or self.set_async_db_uri
        self.async_engine: SQLAlchemyAsyncEngine = create_sqlalchemy_async_engine(
            url=self.url,
            echo=settings.IS_DB_ECHO_LOG,
            **self._engine_options(),
        )
        # One session per request, all from the same factory
        self.async_session_factory: sqlalchemy_async_sessionmaker[SQLAlchemyAsyncSession] = sqlalchemy_async_sessionmaker(
            bind=self.async_engine,
            expire_on_commit=settings.IS_DB_EXPIRE_ON_COMMIT,
            class_=SQLAlchemyAsyncSession,
        )
        self.pool: SQLAlchemyPool = self.async_engine.pool

    def _engine_options(self) -> dict:
        if self.url.startswith("sqlite"):
            # Local development without PostgreSQL; pool sizing does not apply
            return {"connect_args": {"check_same_thread": False}}
        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_POOL_OVERFLOW,
            "pool_timeout": settings.DB_TIMEOUT,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
            "connect_args": {"ssl": "require"} if settings.DB_SSL_REQUIRED else {},
        }

    def get_session(self) -> SQLAlchemyAsyncSession:
        """
        Get a new database session.
        Each call returns a new session instance for better concurrency support.
        """
        return self.async_session_factory()

    @property
    def set_async_db_uri(self) -> str:
        """
        Set the synchronous database driver into asynchronous version by utilizing AsyncPG:
            `postgresql://` => `postgresql+asyncpg://`
        """
        return f"postgresql+asyncpg://{settings.DB_POSTGRES_USERNAME}:{settings.DB_POSTGRES_PASSWORD}@{settings.DB_POSTGRES_HOST}:{settings.DB_POSTGRES_PORT}/{settings.DB_POSTGRES_NAME}"


async_db: AsyncDatabase = AsyncDatabase()
