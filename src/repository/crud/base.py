from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession as SQLAlchemyAsyncSession


class BaseCRUDRepository:
    def __init__(self, async_session: SQLAlchemyAsyncSession):
        self.async_session = async_session

    def _insert(self, table):  # type: ignore[no-untyped-def]
        """Dialect-specific INSERT supporting ON CONFLICT upserts."""
        if self.async_session.get_bind().dialect.name == "sqlite":
            return sqlite_insert(table)
        return pg_insert(table)
