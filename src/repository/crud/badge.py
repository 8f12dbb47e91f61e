import datetime
from typing import Iterable

import sqlalchemy

from src.models.db.badge import EarnedBadge
from src.repository.crud.base import BaseCRUDRepository


class EarnedBadgeCRUDRepository(BaseCRUDRepository):
    async def list_by_user(self, *, user_id: str) -> list[EarnedBadge]:
        stmt = (
            sqlalchemy.select(EarnedBadge)
            .where(EarnedBadge.user_id == user_id)
            .order_by(EarnedBadge.earned_at.desc(), EarnedBadge.id.desc())
        )
        query = await self.async_session.execute(statement=stmt)
        return list(query.scalars().all())

    async def upsert_many(self, *, user_id: str, badges: Iterable[dict], earned_at: datetime.datetime) -> int:
        """Write every given badge as earned. Existing rows keep their first ``earned_at``."""
        written = 0
        for badge in badges:
            stmt = (
                self._insert(EarnedBadge)
                .values(
                    user_id=user_id,
                    badge_id=badge["id"],
                    name=badge["name"],
                    description=badge["description"],
                    icon=badge["icon"],
                    tier=badge["tier"],
                    earned_at=earned_at,
                )
                .on_conflict_do_update(
                    index_elements=[EarnedBadge.user_id, EarnedBadge.badge_id],
                    set_={
                        "name": badge["name"],
                        "description": badge["description"],
                        "icon": badge["icon"],
                        "tier": badge["tier"],
                    },
                )
            )
            await self.async_session.execute(stmt)
            written += 1
        await self.async_session.commit()
        return written
