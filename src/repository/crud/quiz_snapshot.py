import datetime

import sqlalchemy

from src.models.db.quiz_snapshot import QuizSnapshot
from src.repository.crud.base import BaseCRUDRepository


class QuizSnapshotCRUDRepository(BaseCRUDRepository):
    async def get(self, *, storage_key: str) -> QuizSnapshot | None:
        stmt = sqlalchemy.select(QuizSnapshot).where(QuizSnapshot.storage_key == storage_key).execution_options(
            populate_existing=True
        )
        query = await self.async_session.execute(statement=stmt)
        return query.scalar()  # type: ignore

    async def put(self, *, storage_key: str, payload: dict) -> None:
        now = datetime.datetime.now(datetime.timezone.utc)
        stmt = (
            self._insert(QuizSnapshot)
            .values(storage_key=storage_key, payload=payload, updated_at=now)
            .on_conflict_do_update(
                index_elements=[QuizSnapshot.storage_key],
                set_={"payload": payload, "updated_at": now},
            )
        )
        await self.async_session.execute(stmt)
        await self.async_session.commit()

    async def delete(self, *, storage_key: str) -> bool:
        stmt = sqlalchemy.delete(QuizSnapshot).where(QuizSnapshot.storage_key == storage_key)
        result = await self.async_session.execute(stmt)
        await self.async_session.commit()
        return bool(result.rowcount)
