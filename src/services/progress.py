"""History log plus the streak/badge side effects that follow every saved session."""

from __future__ import annotations

import datetime
import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from src.config.manager import settings
from src.models.db.badge import EarnedBadge
from src.models.db.interview_history import InterviewHistory
from src.models.db.user_profile import UserProfile
from src.models.schemas.history import HistoryCreate
from src.models.schemas.progress import BadgeBoardResponse, BadgeOut, BadgeTierGroup
from src.repository.crud.badge import EarnedBadgeCRUDRepository
from src.repository.crud.history import InterviewHistoryCRUDRepository
from src.repository.crud.profile import UserProfileCRUDRepository
from src.repository.crud.revision import RevisionQuestionCRUDRepository
from src.services.badges import BADGE_CATALOG, TIER_ORDER, badge_definitions, evaluate_badges, numeric_score
from src.services.streak import compute_streak, local_date

logger = logging.getLogger(__name__)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ProgressService:
    def __init__(
        self,
        history_repo: InterviewHistoryCRUDRepository,
        profile_repo: UserProfileCRUDRepository,
        badge_repo: EarnedBadgeCRUDRepository,
        revision_repo: RevisionQuestionCRUDRepository,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        self._history = history_repo
        self._profiles = profile_repo
        self._badges = badge_repo
        self._revisions = revision_repo
        self._clock = clock

    async def record_session(self, user_id: str, entry: HistoryCreate) -> InterviewHistory:
        """Append a completed session, then refresh streak and badges.

        The append itself propagates errors; a failure in the follow-up
        refresh is logged and the stored record is still returned.
        """
        record = await self._history.append(
            user_id=user_id,
            type=entry.type.value,
            session_id=entry.session_id,
            summary=entry.summary,
            data_reference=entry.data_reference,
            duration_seconds=entry.duration_seconds,
            score_rating=entry.score_rating,
            timestamp=self._clock(),
        )
        if not await self.refresh_after_activity(user_id):
            # The rollback expired the stored record
            await self._history.async_session.refresh(record)
        return record

    async def refresh_after_activity(self, user_id: str) -> bool:
        try:
            profile = await self.touch_streak(user_id)
            await self.award_badges(user_id, streak=profile.streak)
        except SQLAlchemyError:
            logger.exception("Could not update streak/badges for user %s", user_id)
            await self._profiles.async_session.rollback()
            return False
        return True

    async def touch_streak(self, user_id: str) -> UserProfile:
        now = self._clock()
        profile = await self._profiles.get_or_create(user_id=user_id)
        last = local_date(profile.last_activity_date) if profile.last_activity_date else None
        new_streak, changed = compute_streak(profile.streak or 0, last, local_date(now))
        if not changed:
            return profile
        logger.debug("Streak for %s: %s -> %s", user_id, profile.streak, new_streak)
        return await self._profiles.update_streak(user_id=user_id, streak=new_streak, last_activity_date=now)

    async def award_badges(self, user_id: str, *, streak: int) -> set[str]:
        now = self._clock()
        history = await self._history.list_recent(user_id=user_id, limit=settings.HISTORY_LIST_LIMIT)
        revision_count = await self._revisions.count_by_user(user_id=user_id)
        badge_ids = evaluate_badges(history, streak, revision_count, local_date(now))
        if badge_ids:
            await self._badges.upsert_many(
                user_id=user_id,
                badges=[badge.model_dump() for badge in badge_definitions(badge_ids)],
                earned_at=now,
            )
        return badge_ids

    async def rollback(self) -> None:
        await self._history.async_session.rollback()

    async def list_history(self, user_id: str) -> list[InterviewHistory]:
        return await self._history.list_recent(user_id=user_id, limit=settings.HISTORY_LIST_LIMIT)

    async def get_history(self, user_id: str, history_id: int) -> InterviewHistory:
        return await self._history.get_by_id_and_user(history_id=history_id, user_id=user_id)

    async def has_completed_diagnostic(self, user_id: str) -> bool:
        return await self._history.has_diagnostic(user_id=user_id)

    async def average_accuracy_for_topic(self, user_id: str, topic: str) -> float | None:
        records = await self._history.list_recent_for_topic(
            user_id=user_id, topic=topic, limit=settings.GOAL_ACCURACY_WINDOW
        )
        scores = [s for s in (numeric_score(r.score_rating) for r in records) if s is not None]
        if not scores:
            return None
        return sum(scores) / len(scores)

    async def get_profile(self, user_id: str) -> UserProfile:
        return await self._profiles.get_or_create(user_id=user_id)

    async def count_sessions(self, user_id: str) -> int:
        return await self._history.count_by_user(user_id=user_id)

    async def list_badges(self, user_id: str) -> list[BadgeOut]:
        rows = await self._badges.list_by_user(user_id=user_id)
        return [_earned_badge_out(row) for row in rows]

    async def badge_board(self, user_id: str) -> BadgeBoardResponse:
        earned = {row.badge_id: row for row in await self._badges.list_by_user(user_id=user_id)}
        tiers = []
        for tier in TIER_ORDER:
            badges = []
            for definition in BADGE_CATALOG:
                if definition.tier != tier:
                    continue
                row = earned.get(definition.id)
                badges.append(
                    BadgeOut(
                        **definition.model_dump(),
                        earned=row is not None,
                        earned_at=row.earned_at if row is not None else None,
                    )
                )
            tiers.append(BadgeTierGroup(tier=tier, badges=badges))  # type: ignore[arg-type]
        return BadgeBoardResponse(
            earned_count=sum(1 for badge_id in earned if badge_id in {b.id for b in BADGE_CATALOG}),
            total_count=len(BADGE_CATALOG),
            tiers=tiers,
        )


def _earned_badge_out(row: EarnedBadge) -> BadgeOut:
    return BadgeOut(
        id=row.badge_id,
        name=row.name,
        description=row.description,
        icon=row.icon,
        tier=row.tier,  # type: ignore[arg-type]
        earned=True,
        earned_at=row.earned_at,
    )
