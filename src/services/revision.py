"""Review Hub: aptitude questions the user tagged for later revision."""

from __future__ import annotations

import logging
import uuid

from src.models.db.interview_history import HistoryTypeEnum
from src.models.db.revision_question import RevisionQuestion
from src.models.schemas.aptitude import AptitudeQuestion
from src.models.schemas.history import HistoryCreate
from src.repository.crud.revision import RevisionQuestionCRUDRepository
from src.services.progress import ProgressService

logger = logging.getLogger(__name__)

REMOVED_FROM_REVIEW_HUB_SUMMARY = "Removed 1 item from Review Hub."


class RevisionService:
    def __init__(self, revision_repo: RevisionQuestionCRUDRepository, progress: ProgressService) -> None:
        self._revisions = revision_repo
        self._progress = progress

    async def tag(self, user_id: str, question: AptitudeQuestion, quiz_topic: str) -> RevisionQuestion:
        entry = await self._revisions.create(user_id=user_id, question=question.model_dump(), quiz_topic=quiz_topic)
        # Revision count feeds the Revisionist badge
        if not await self._progress.refresh_after_activity(user_id):
            await self._revisions.async_session.refresh(entry)
        return entry

    async def list(self, user_id: str) -> list[RevisionQuestion]:
        return await self._revisions.list_by_user(user_id=user_id)

    async def untag(self, user_id: str, revision_id: int, from_review_hub: bool = False) -> None:
        """Delete a tagged question; removals made from the Review Hub are logged to history."""
        await self._revisions.delete(user_id=user_id, revision_id=revision_id)
        if not from_review_hub:
            return
        await self._progress.record_session(
            user_id,
            HistoryCreate(
                type=HistoryTypeEnum.REVIEW_HUB,
                session_id=uuid.uuid4().hex,
                summary=REMOVED_FROM_REVIEW_HUB_SUMMARY,
                data_reference={"review_items_removed": 1},
            ),
        )
        logger.info("User %s removed revision question %s from the Review Hub", user_id, revision_id)
