import datetime

import sqlalchemy

from src.models.db.user_goal import UserGoal
from src.repository.crud.base import BaseCRUDRepository


class UserGoalCRUDRepository(BaseCRUDRepository):
    async def get_active_by_user(self, *, user_id: str) -> UserGoal | None:
        stmt = (
            sqlalchemy.select(UserGoal)
            .where(UserGoal.user_id == user_id)
            .where(UserGoal.is_active.is_(True))
            .order_by(UserGoal.id.desc())
            .limit(1)
        )
        query = await self.async_session.execute(statement=stmt)
        return query.scalar()  # type: ignore

    async def list_by_user(self, *, user_id: str) -> list[UserGoal]:
        stmt = sqlalchemy.select(UserGoal).where(UserGoal.user_id == user_id).order_by(UserGoal.id.desc())
        query = await self.async_session.execute(statement=stmt)
        return list(query.scalars().all())

    async def replace_active_goal(
        self,
        *,
        user_id: str,
        topic: str,
        target_accuracy: float,
        initial_accuracy: float,
        start_date: datetime.datetime,
        end_date: datetime.datetime,
    ) -> UserGoal:
        """Deactivate every active goal of the user and insert the new one in the same transaction."""
        deactivate = (
            sqlalchemy.update(UserGoal)
            .where(UserGoal.user_id == user_id)
            .where(UserGoal.is_active.is_(True))
            .values(is_active=False)
        )
        await self.async_session.execute(deactivate)

        new_goal = UserGoal(
            user_id=user_id,
            topic=topic,
            target_accuracy=target_accuracy,
            initial_accuracy=initial_accuracy,
            current_accuracy=initial_accuracy,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
        )
        self.async_session.add(new_goal)
        await self.async_session.commit()
        await self.async_session.refresh(new_goal)
        return new_goal

    async def update_current_accuracy(self, *, goal: UserGoal, current_accuracy: float) -> UserGoal:
        goal.current_accuracy = current_accuracy
        await self.async_session.commit()
        await self.async_session.refresh(goal)
        return goal
