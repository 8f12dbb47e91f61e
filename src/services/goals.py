"""Single active improvement goal per user."""

from __future__ import annotations

import datetime
import logging
from typing import Callable

from src.models.db.user_goal import UserGoal
from src.models.schemas.aptitude import AptitudeTopicEnum
from src.repository.crud.goal import UserGoalCRUDRepository
from src.services import llm
from src.services.progress import ProgressService, utcnow
from src.services.streak import as_aware
from src.utilities.exceptions.domain import InvalidGoalError

logger = logging.getLogger(__name__)

MIN_TARGET_ACCURACY = 50.0
MAX_TARGET_ACCURACY = 100.0
MIN_GOAL_DAYS = 7
MAX_GOAL_DAYS = 90
DEFAULT_GOAL_DAYS = 30


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class GoalTracker:
    def __init__(
        self,
        goal_repo: UserGoalCRUDRepository,
        progress: ProgressService,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        self._goals = goal_repo
        self._progress = progress
        self._clock = clock

    async def set_goal(
        self, user_id: str, topic: AptitudeTopicEnum | str, target_accuracy: float, deadline: datetime.datetime
    ) -> UserGoal:
        """Deactivate the current goal (if any) and start a new one from today's accuracy."""
        topic_value = topic.value if isinstance(topic, AptitudeTopicEnum) else str(topic)
        start = self._clock()
        if as_aware(deadline) <= start:
            raise InvalidGoalError("Goal deadline must be in the future")
        if not 0 <= target_accuracy <= 100:
            raise InvalidGoalError("Target accuracy must be between 0 and 100")

        current = await self._progress.average_accuracy_for_topic(user_id, topic_value)
        initial = current if current is not None else 0.0
        goal = await self._goals.replace_active_goal(
            user_id=user_id,
            topic=topic_value,
            target_accuracy=float(target_accuracy),
            initial_accuracy=initial,
            start_date=start,
            end_date=as_aware(deadline),
        )
        logger.info("User %s set a %s goal of %.0f%%", user_id, topic_value, target_accuracy)
        return goal

    async def get_active_goal(self, user_id: str) -> UserGoal | None:
        """Return the active goal with ``current_accuracy`` refreshed from recent quizzes."""
        goal = await self._goals.get_active_by_user(user_id=user_id)
        if goal is None:
            return None
        current = await self._progress.average_accuracy_for_topic(user_id, goal.topic)
        if current is not None and current != goal.current_accuracy:
            goal = await self._goals.update_current_accuracy(goal=goal, current_accuracy=current)
        return goal

    async def set_goal_from_text(self, user_id: str, goal_text: str) -> UserGoal:
        """Turn e.g. "Improve in Logical Reasoning in 2 weeks" into an active goal.

        Raises ``InvalidGoalError`` for empty text or an unusable AI reply;
        ``AIServiceError`` propagates when the AI service is unreachable.
        """
        text = (goal_text or "").strip()
        if not text:
            raise InvalidGoalError("Please enter your goal.")

        topic = await llm.extract_topic_from_goal(text)
        current = await self._progress.average_accuracy_for_topic(user_id, topic.value)
        parsed = await llm.parse_user_goal(text, current)
        if not parsed.ok:
            raise InvalidGoalError("Couldn't understand that goal. Try: 'Improve in Logical Reasoning in 2 weeks'.")

        goal_topic = parsed.value.topic  # type: ignore[union-attr]
        if goal_topic != topic:
            current = await self._progress.average_accuracy_for_topic(user_id, goal_topic.value)
        target = _clamp(float(parsed.value.target_accuracy), MIN_TARGET_ACCURACY, MAX_TARGET_ACCURACY)  # type: ignore[union-attr]
        days = int(_clamp(int(parsed.value.days or DEFAULT_GOAL_DAYS), MIN_GOAL_DAYS, MAX_GOAL_DAYS))  # type: ignore[union-attr]

        start = self._clock()
        goal = await self._goals.replace_active_goal(
            user_id=user_id,
            topic=goal_topic.value,
            target_accuracy=target,
            initial_accuracy=current if current is not None else 0.0,
            start_date=start,
            end_date=start + datetime.timedelta(days=days),
        )
        logger.info("User %s set a %s goal of %.0f%% in %d days", user_id, goal_topic.value, target, days)
        return goal
