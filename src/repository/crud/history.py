import datetime

import sqlalchemy

from src.models.db.interview_history import HistoryTypeEnum, InterviewHistory
from src.repository.crud.base import BaseCRUDRepository
from src.utilities.exceptions.database import EntityDoesNotExist


class InterviewHistoryCRUDRepository(BaseCRUDRepository):
    async def append(
        self,
        *,
        user_id: str,
        type: str,
        session_id: str,
        summary: str,
        data_reference: dict,
        duration_seconds: float | None = None,
        score_rating: float | str | None = None,
        timestamp: datetime.datetime | None = None,
    ) -> InterviewHistory:
        entry = InterviewHistory(
            user_id=user_id,
            type=type,
            session_id=session_id,
            summary=summary,
            data_reference=data_reference,
            duration_seconds=duration_seconds,
            score_rating=score_rating,
        )
        if timestamp is not None:
            entry.timestamp = timestamp
        self.async_session.add(entry)
        await self.async_session.commit()
        await self.async_session.refresh(entry)
        return entry

    async def list_recent(self, *, user_id: str, limit: int = 100) -> list[InterviewHistory]:
        stmt = (
            sqlalchemy.select(InterviewHistory)
            .where(InterviewHistory.user_id == user_id)
            .order_by(InterviewHistory.timestamp.desc(), InterviewHistory.id.desc())
            .limit(limit)
        )
        query = await self.async_session.execute(statement=stmt)
        return list(query.scalars().all())

    async def get_by_id_and_user(self, *, history_id: int, user_id: str) -> InterviewHistory:
        stmt = (
            sqlalchemy.select(InterviewHistory)
            .where(InterviewHistory.id == history_id)
            .where(InterviewHistory.user_id == user_id)
        )
        query = await self.async_session.execute(statement=stmt)
        entry = query.scalar()
        if not entry:
            raise EntityDoesNotExist("History record does not exist!")
        return entry  # type: ignore

    async def count_by_user(self, *, user_id: str) -> int:
        stmt = sqlalchemy.select(sqlalchemy.func.count(InterviewHistory.id)).where(InterviewHistory.user_id == user_id)
        query = await self.async_session.execute(statement=stmt)
        return int(query.scalar() or 0)

    async def has_diagnostic(self, *, user_id: str) -> bool:
        stmt = (
            sqlalchemy.select(InterviewHistory.id)
            .where(InterviewHistory.user_id == user_id)
            .where(InterviewHistory.type == HistoryTypeEnum.APTITUDE.value)
            .where(InterviewHistory.data_reference["quiz_type"].as_string() == "Diagnostic")
            .limit(1)
        )
        query = await self.async_session.execute(statement=stmt)
        return query.scalar() is not None

    async def list_recent_for_topic(self, *, user_id: str, topic: str, limit: int = 5) -> list[InterviewHistory]:
        stmt = (
            sqlalchemy.select(InterviewHistory)
            .where(InterviewHistory.user_id == user_id)
            .where(InterviewHistory.type == HistoryTypeEnum.APTITUDE.value)
            .where(InterviewHistory.data_reference["topic"].as_string() == topic)
            .order_by(InterviewHistory.timestamp.desc(), InterviewHistory.id.desc())
            .limit(limit)
        )
        query = await self.async_session.execute(statement=stmt)
        return list(query.scalars().all())
