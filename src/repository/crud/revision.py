import sqlalchemy

from src.models.db.revision_question import RevisionQuestion
from src.repository.crud.base import BaseCRUDRepository
from src.utilities.exceptions.database import EntityDoesNotExist


class RevisionQuestionCRUDRepository(BaseCRUDRepository):
    async def create(self, *, user_id: str, question: dict, quiz_topic: str) -> RevisionQuestion:
        entry = RevisionQuestion(user_id=user_id, question=question, quiz_topic=quiz_topic)
        self.async_session.add(entry)
        await self.async_session.commit()
        await self.async_session.refresh(entry)
        return entry

    async def list_by_user(self, *, user_id: str) -> list[RevisionQuestion]:
        stmt = (
            sqlalchemy.select(RevisionQuestion)
            .where(RevisionQuestion.user_id == user_id)
            .order_by(RevisionQuestion.timestamp.desc(), RevisionQuestion.id.desc())
        )
        query = await self.async_session.execute(statement=stmt)
        return list(query.scalars().all())

    async def count_by_user(self, *, user_id: str) -> int:
        stmt = sqlalchemy.select(sqlalchemy.func.count(RevisionQuestion.id)).where(RevisionQuestion.user_id == user_id)
        query = await self.async_session.execute(statement=stmt)
        return int(query.scalar() or 0)

    async def delete(self, *, user_id: str, revision_id: int) -> None:
        stmt = (
            sqlalchemy.select(RevisionQuestion)
            .where(RevisionQuestion.id == revision_id)
            .where(RevisionQuestion.user_id == user_id)
        )
        query = await self.async_session.execute(statement=stmt)
        entry: RevisionQuestion | None = query.scalar()  # type: ignore
        if not entry:
            raise EntityDoesNotExist("Revision question does not exist!")
        await self.async_session.delete(entry)
        await self.async_session.commit()
