import datetime

import pytest

from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.aptitude import AptitudeTopicEnum
from src.models.schemas.history import HistoryCreate
from src.services import llm
from src.services.goals import GoalTracker
from src.services.llm import LLMResult, ParsedGoalLLM
from src.utilities.exceptions.domain import AIServiceError, InvalidGoalError


@pytest.fixture
def tracker(repos, progress, clock):
    return GoalTracker(repos.goal, progress, clock=clock)


async def _quiz(progress, score, topic=AptitudeTopicEnum.LOGICAL_REASONING.value, session="s"):
    await progress.record_session(
        "u1",
        HistoryCreate(
            type=HistoryTypeEnum.APTITUDE,
            session_id=session,
            score_rating=score,
            summary="quiz",
            data_reference={"topic": topic, "difficulty": "Medium"},
        ),
    )


@pytest.mark.asyncio
async def test_setting_a_goal_deactivates_the_previous_one(tracker, repos, clock):
    deadline = clock() + datetime.timedelta(days=14)
    first = await tracker.set_goal("u1", AptitudeTopicEnum.VERBAL_ABILITY, 70, deadline)
    second = await tracker.set_goal("u1", AptitudeTopicEnum.QUANTITATIVE, 85, deadline)

    goals = await repos.goal.list_by_user(user_id="u1")
    assert len(goals) == 2
    assert [g.id for g in goals if g.is_active] == [second.id]
    assert first.id != second.id


@pytest.mark.asyncio
async def test_goal_starts_from_current_accuracy_and_refreshes_on_read(tracker, progress, clock):
    await _quiz(progress, 60.0, session="a")
    goal = await tracker.set_goal(
        "u1", AptitudeTopicEnum.LOGICAL_REASONING, 90, clock() + datetime.timedelta(days=30)
    )
    assert goal.initial_accuracy == pytest.approx(60.0)
    assert goal.current_accuracy == pytest.approx(60.0)

    await _quiz(progress, 100.0, session="b")
    active = await tracker.get_active_goal("u1")
    assert active is not None
    assert active.current_accuracy == pytest.approx(80.0)
    assert active.initial_accuracy == pytest.approx(60.0)


@pytest.mark.asyncio
async def test_goal_without_history_starts_at_zero(tracker, clock):
    goal = await tracker.set_goal("u1", AptitudeTopicEnum.DATA_INTERPRETATION, 75, clock() + datetime.timedelta(days=7))
    assert goal.initial_accuracy == 0.0
    assert (await tracker.get_active_goal("u1")).current_accuracy == 0.0


@pytest.mark.asyncio
async def test_deadline_in_the_past_is_rejected(tracker, clock):
    with pytest.raises(InvalidGoalError):
        await tracker.set_goal("u1", AptitudeTopicEnum.QUANTITATIVE, 80, clock() - datetime.timedelta(days=1))


@pytest.mark.asyncio
async def test_goal_from_text_clamps_the_ai_proposal(tracker, clock, monkeypatch):
    async def _topic(text):
        return AptitudeTopicEnum.LOGICAL_REASONING

    async def _parse(text, current):
        return LLMResult(
            value=ParsedGoalLLM(topic=AptitudeTopicEnum.LOGICAL_REASONING, target_accuracy=120, days=3)
        )

    monkeypatch.setattr(llm, "extract_topic_from_goal", _topic)
    monkeypatch.setattr(llm, "parse_user_goal", _parse)

    goal = await tracker.set_goal_from_text("u1", "Get better at logical reasoning in 3 days")
    assert goal.topic == AptitudeTopicEnum.LOGICAL_REASONING.value
    assert goal.target_accuracy == 100.0
    end = goal.end_date if goal.end_date.tzinfo else goal.end_date.replace(tzinfo=datetime.timezone.utc)
    assert end - clock() == datetime.timedelta(days=7)


@pytest.mark.asyncio
async def test_goal_from_text_errors(tracker, monkeypatch):
    with pytest.raises(InvalidGoalError):
        await tracker.set_goal_from_text("u1", "   ")

    async def _topic(text):
        return AptitudeTopicEnum.QUANTITATIVE

    async def _unparseable(text, current):
        return LLMResult(error="invalid JSON")

    async def _unreachable(text, current):
        raise AIServiceError("timeout")

    monkeypatch.setattr(llm, "extract_topic_from_goal", _topic)
    monkeypatch.setattr(llm, "parse_user_goal", _unparseable)
    with pytest.raises(InvalidGoalError):
        await tracker.set_goal_from_text("u1", "improve maths")

    monkeypatch.setattr(llm, "parse_user_goal", _unreachable)
    with pytest.raises(AIServiceError):
        await tracker.set_goal_from_text("u1", "improve maths")
