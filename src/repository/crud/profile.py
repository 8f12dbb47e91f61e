import datetime

import sqlalchemy

from src.models.db.user_profile import UserProfile
from src.repository.crud.base import BaseCRUDRepository


class UserProfileCRUDRepository(BaseCRUDRepository):
    async def get_by_user(self, *, user_id: str) -> UserProfile | None:
        stmt = sqlalchemy.select(UserProfile).where(UserProfile.user_id == user_id)
        query = await self.async_session.execute(statement=stmt)
        return query.scalar()  # type: ignore

    async def get_or_create(self, *, user_id: str) -> UserProfile:
        profile = await self.get_by_user(user_id=user_id)
        if profile is not None:
            return profile
        profile = UserProfile(user_id=user_id, streak=0, last_activity_date=None)
        self.async_session.add(profile)
        await self.async_session.commit()
        await self.async_session.refresh(profile)
        return profile

    async def update_streak(
        self, *, user_id: str, streak: int, last_activity_date: datetime.datetime
    ) -> UserProfile:
        profile = await self.get_or_create(user_id=user_id)
        profile.streak = streak
        profile.last_activity_date = last_activity_date
        await self.async_session.commit()
        await self.async_session.refresh(profile)
        return profile
