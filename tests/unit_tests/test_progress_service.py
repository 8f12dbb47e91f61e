import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.history import HistoryCreate
from src.utilities.exceptions.database import EntityDoesNotExist


def _aptitude(score=80.0, topic="Logical Reasoning", quiz_type="Practice", session="s1"):
    return HistoryCreate(
        type=HistoryTypeEnum.APTITUDE,
        session_id=session,
        score_rating=score,
        summary="Completed a Medium quiz.",
        data_reference={"topic": topic, "difficulty": "Medium", "quizType": quiz_type, "questionsAnswered": 5},
    )


@pytest.mark.asyncio
async def test_record_session_updates_streak_once_per_day(progress, clock):
    await progress.record_session("u1", _aptitude(session="a"))
    await progress.record_session("u1", _aptitude(session="b"))
    profile = await progress.get_profile("u1")
    assert profile.streak == 1

    clock.advance(days=1)
    await progress.record_session("u1", _aptitude(session="c"))
    profile = await progress.get_profile("u1")
    assert profile.streak == 2

    clock.advance(days=3)
    await progress.record_session("u1", _aptitude(session="d"))
    profile = await progress.get_profile("u1")
    assert profile.streak == 1


@pytest.mark.asyncio
async def test_history_is_newest_first_and_scoped_to_user(progress, clock):
    await progress.record_session("u1", _aptitude(session="old"))
    clock.advance(minutes=5)
    await progress.record_session("u1", _aptitude(session="new"))
    await progress.record_session("u2", _aptitude(session="other"))

    items = await progress.list_history("u1")
    assert [i.session_id for i in items] == ["new", "old"]
    # camelCase input is stored snake_case
    assert items[0].data_reference["quiz_type"] == "Practice"

    with pytest.raises(EntityDoesNotExist):
        await progress.get_history("u2", items[0].id)


@pytest.mark.asyncio
async def test_badges_are_never_revoked(progress, repos, clock):
    for i in range(10):
        await progress.record_session("u1", _aptitude(session=f"s{i}"))
    first = {b.id: b.earned_at for b in await progress.list_badges("u1")}
    assert "apti-10" in first

    # Re-evaluating with a streak that no longer qualifies keeps what was earned
    clock.advance(days=1)
    await progress.award_badges("u1", streak=0)
    again = {b.id: b.earned_at for b in await progress.list_badges("u1")}
    assert set(first) <= set(again)
    assert again["apti-10"] == first["apti-10"]


@pytest.mark.asyncio
async def test_diagnostic_detection_and_topic_accuracy(progress):
    assert await progress.has_completed_diagnostic("u1") is False
    await progress.record_session("u1", _aptitude(score=60.0, session="a"))
    await progress.record_session("u1", _aptitude(score=80.0, session="b"))
    await progress.record_session("u1", _aptitude(score=20.0, topic="Verbal Ability", session="c"))
    await progress.record_session("u1", _aptitude(score=70.0, topic="Diagnostic Test", quiz_type="Diagnostic", session="d"))

    assert await progress.has_completed_diagnostic("u1") is True
    assert await progress.average_accuracy_for_topic("u1", "Logical Reasoning") == pytest.approx(70.0)
    assert await progress.average_accuracy_for_topic("u1", "Data Interpretation") is None


@pytest.mark.asyncio
async def test_badge_board_groups_catalog_by_tier(progress):
    await progress.record_session("u1", _aptitude(score=95.0, session="a"))
    board = await progress.badge_board("u1")
    assert [t.tier for t in board.tiers] == ["Gold", "Silver", "Bronze"]
    assert board.total_count == 19
    silver = {b.id: b for b in board.tiers[1].badges}
    assert silver["logical-master"].earned is True
    assert silver["quant-master"].earned is False


@pytest.mark.asyncio
async def test_side_effect_failure_does_not_fail_the_append(progress, monkeypatch):
    async def _boom(*args, **kwargs):
        raise SQLAlchemyError("profile store down")

    monkeypatch.setattr(progress, "touch_streak", _boom)
    record = await progress.record_session("u1", _aptitude())
    assert record.id is not None
    assert await progress.count_sessions("u1") == 1
