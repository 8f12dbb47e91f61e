import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.models.schemas.aptitude import AptitudeQuestion
from src.services.aptitude import (
    AptitudeQuizService,
    AptitudeQuizSession,
    analyze_performance,
    derive_quiz_topic,
    practice_time_limit,
    recommended_difficulty,
)
from src.services.llm import LLMResult
from src.services.quiz_cache import InMemorySnapshotStorage, QuizResumeCache
from src.services.registry import LiveSessionRegistry
from src.utilities.exceptions.domain import AIServiceError, InvalidQuizSelectionError, QuizStateError


class TickClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


def _questions(n=5, sub_topic="Percentage"):
    return [
        AptitudeQuestion(
            question=f"Q{i}", options=["a", "b", "c", "d"], correct_answer="a", explanation="", sub_topic=sub_topic
        )
        for i in range(n)
    ]


@pytest.fixture
def tick():
    return TickClock()


@pytest.fixture
def service_factory(progress, tick):
    def _make(source=None):
        async def _default_source(sub_topics, count, difficulty):
            return LLMResult(value=_questions(count))

        return AptitudeQuizService(
            progress,
            QuizResumeCache(InMemorySnapshotStorage()),
            LiveSessionRegistry(),
            question_source=source or _default_source,
            clock=tick,
        )

    return _make


def test_quiz_topic_and_time_limit():
    assert derive_quiz_topic(["Percentage", "Time & Work"]) == "Quantitative Aptitude"
    assert derive_quiz_topic(["Percentage", "Syllogism"]) == "Mixed Topics"
    assert practice_time_limit(10, "Easy") == 750
    assert practice_time_limit(10, "Hard") == 1200
    assert recommended_difficulty(39.9) == "Easy"
    assert recommended_difficulty(80.0) == "Medium"
    assert recommended_difficulty(81.0) == "Hard"


def test_three_of_five_scores_sixty(tick):
    session = AptitudeQuizSession(
        questions=_questions(5), topic="Quantitative Aptitude", difficulty="Medium",
        quiz_type="Practice", time_limit_seconds=450, clock=tick,
    )
    for answer in ["a", "b", "a", "c", "a"]:
        session.answer(answer)
        session.next()
    result = session.result()
    assert result.score == pytest.approx(60.0)
    assert result.correct_answers == 3
    assert result.incorrect_answers == 2
    assert result.recommended_difficulty == "Medium"


def test_answer_must_be_an_option(tick):
    session = AptitudeQuizSession(
        questions=_questions(1), topic="t", difficulty="Easy", quiz_type="Practice", time_limit_seconds=None, clock=tick
    )
    with pytest.raises(QuizStateError):
        session.answer("z")


def test_performance_quadrants():
    questions = _questions(2, "Percentage") + _questions(2, "Syllogism")
    analysis = analyze_performance(questions, ["a", "a", "b", "b"], [10.0, 10.0, 40.0, 40.0])
    matrix = analysis.speed_accuracy
    assert matrix.fast_accurate == ["Percentage"]
    assert matrix.slow_inaccurate == ["Syllogism"]
    assert analysis.focus_sub_topics == ["Syllogism"]


@pytest.mark.asyncio
async def test_empty_selection_is_rejected(service_factory):
    service = service_factory()
    with pytest.raises(InvalidQuizSelectionError):
        await service.start_practice("u1", ["All Topics"], 5, "Medium")


@pytest.mark.asyncio
async def test_full_practice_flow_writes_history(service_factory, progress, tick):
    service = service_factory()
    state = await service.start_practice("u1", ["Percentage"], 5, "Medium")
    assert state.total_questions == 5
    assert state.time_left == pytest.approx(450)

    step = None
    for answer in ["a", "b", "a", "c", "a"]:
        await service.answer("u1", answer)
        tick.tick(5)
        step = await service.next("u1")
    assert step.finished is True
    assert step.result.score == pytest.approx(60.0)
    assert step.result.saved is True

    history = await progress.list_history("u1")
    assert len(history) == 1
    record = history[0]
    assert record.type == "aptitude"
    assert record.summary == "Completed a Medium Quantitative Aptitude quiz, scoring 3/5."
    assert record.data_reference["q_and_a_list"][1]["feedback_summary"] == "Incorrect. Correct answer was a."
    with pytest.raises(QuizStateError):
        service.get_state("u1")


@pytest.mark.asyncio
async def test_suspend_and_resume_keeps_answers_and_remaining_time(service_factory, tick):
    service = service_factory()
    await service.start_practice("u1", ["Percentage"], 5, "Easy")
    await service.answer("u1", "a")
    await service.next("u1")
    tick.tick(100)
    saved = await service.suspend("u1")
    assert saved.time_left == pytest.approx(375 - 100)
    assert (await service.saved_summary("u1")).has_saved_quiz is True

    tick.tick(3600)
    state = await service.resume("u1")
    assert state.current_question_index == 1
    assert state.answered == 1
    assert state.time_left == pytest.approx(275)
    assert (await service.saved_summary("u1")).has_saved_quiz is False


@pytest.mark.asyncio
async def test_starting_a_new_quiz_discards_the_saved_one(service_factory):
    service = service_factory()
    await service.start_practice("u1", ["Percentage"], 5, "Easy")
    await service.suspend("u1")
    await service.start_diagnostic("u1")
    assert (await service.saved_summary("u1")).has_saved_quiz is False
    assert service.get_state("u1").total_questions == 30


@pytest.mark.asyncio
async def test_expired_quiz_is_submitted_on_next_interaction(service_factory, tick):
    service = service_factory()
    await service.start_practice("u1", ["Percentage"], 2, "Easy")
    tick.tick(1000)
    step = await service.answer("u1", "a")
    assert step.finished is True
    assert step.result.correct_answers == 0


@pytest.mark.asyncio
async def test_question_source_failure_uses_static_bank(service_factory):
    async def _down(sub_topics, count, difficulty):
        raise AIServiceError("unreachable")

    service = service_factory(_down)
    state = await service.start_practice("u1", ["Percentage"], 3, "Medium")
    assert state.total_questions == 3


@pytest.mark.asyncio
async def test_failed_history_write_still_returns_the_result(service_factory, progress, monkeypatch):
    async def _fail(*args, **kwargs):
        raise SQLAlchemyError("db down")

    service = service_factory()
    await service.start_practice("u1", ["Percentage"], 2, "Easy")
    monkeypatch.setattr(progress, "record_session", _fail)
    result = await service.submit("u1")
    assert result.saved is False
    assert "db down" in result.save_error
