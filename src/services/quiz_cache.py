"""Resume support for an in-progress aptitude quiz.

One snapshot slot per user (``settings.QUIZ_SNAPSHOT_SLOT``); saving
overwrites it. The slot is cleared on submit, on explicit abandonment, when a
new quiz starts and when the snapshot is resumed.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Protocol

import pydantic

from src.config.manager import settings
from src.models.schemas.aptitude import SavedQuizState, SavedQuizSummary
from src.repository.crud.quiz_snapshot import QuizSnapshotCRUDRepository

logger = logging.getLogger(__name__)


class SnapshotStorage(Protocol):
    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, payload: dict[str, Any]) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemorySnapshotStorage:
    def __init__(self) -> None:
        self._slots: dict[str, dict[str, Any]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        return self._slots.get(key)

    async def set(self, key: str, payload: dict[str, Any]) -> None:
        self._slots[key] = payload

    async def delete(self, key: str) -> None:
        self._slots.pop(key, None)


class SQLSnapshotStorage:
    """Snapshot slots kept in the ``quiz_snapshot`` table."""

    def __init__(self, repo: QuizSnapshotCRUDRepository) -> None:
        self._repo = repo

    async def get(self, key: str) -> dict[str, Any] | None:
        row = await self._repo.get(storage_key=key)
        return dict(row.payload) if row is not None else None

    async def set(self, key: str, payload: dict[str, Any]) -> None:
        await self._repo.put(storage_key=key, payload=payload)

    async def delete(self, key: str) -> None:
        await self._repo.delete(storage_key=key)


class QuizResumeCache:
    def __init__(self, storage: SnapshotStorage, slot: str | None = None) -> None:
        self._storage = storage
        self._slot = slot or settings.QUIZ_SNAPSHOT_SLOT

    def _key(self, user_id: str) -> str:
        return f"{user_id}:{self._slot}"

    async def save(self, user_id: str, state: SavedQuizState) -> None:
        if state.saved_at is None:
            state = state.model_copy(update={"saved_at": datetime.datetime.now(datetime.timezone.utc)})
        await self._storage.set(self._key(user_id), state.model_dump(mode="json"))

    async def load(self, user_id: str) -> SavedQuizState | None:
        payload = await self._storage.get(self._key(user_id))
        if payload is None:
            return None
        try:
            return SavedQuizState.model_validate(payload)
        except pydantic.ValidationError:
            logger.warning("Discarding unreadable quiz snapshot for user %s", user_id)
            await self.discard(user_id)
            return None

    async def discard(self, user_id: str) -> None:
        await self._storage.delete(self._key(user_id))

    async def take(self, user_id: str) -> SavedQuizState | None:
        """Load and clear the snapshot; the caller restarts its timers from now."""
        state = await self.load(user_id)
        if state is not None:
            await self.discard(user_id)
        return state

    async def summary(self, user_id: str) -> SavedQuizSummary:
        state = await self.load(user_id)
        if state is None:
            return SavedQuizSummary(has_saved_quiz=False)
        return SavedQuizSummary(
            has_saved_quiz=True,
            topic=state.topic,
            quiz_type=state.quiz_type,
            answered=sum(1 for answer in state.user_answers if answer is not None),
            total=len(state.questions),
            current_question_index=state.current_question_index,
            time_left=state.time_left,
            saved_at=state.saved_at,
        )
