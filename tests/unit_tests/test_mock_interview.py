import asyncio

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.models.schemas.mock_interview import RoundTypeEnum
from src.services.llm import FAILED_REPORT
from src.services.mock_interview import (
    NOT_EVALUATED_FEEDBACK,
    CountdownTimer,
    MockInterviewOrchestrator,
    MockInterviewService,
)
from src.services.registry import MOCK_INTERVIEW, LiveSessionRegistry
from src.utilities.exceptions.domain import AIServiceError, QuizStateError, RoundTransitionError


@pytest.fixture
def orchestrator(ai, recorder):
    return MockInterviewOrchestrator(
        user_id="u1", role="Backend Developer", company_tier="High-Growth Startup",
        duration_minutes=45, ai=ai, recorder=recorder,
    )


async def _answer_round(orch, answers, stop_before_last=False):
    count = len(orch.questions[orch.current_round])
    for i in range(count):
        orch.answer(answers(i))
        if stop_before_last and i == count - 1:
            return
        await orch.proceed()


@pytest.mark.asyncio
async def test_full_interview_writes_one_history_record(orchestrator, ai, recorder):
    await orchestrator.start()
    assert orchestrator.current_round == RoundTypeEnum.APTITUDE

    await _answer_round(orchestrator, lambda i: "a" if i % 2 == 0 else "b")
    assert orchestrator.current_round == RoundTypeEnum.TECHNICAL
    await _answer_round(orchestrator, lambda i: f"tech answer {i}")
    assert orchestrator.current_round == RoundTypeEnum.HR
    await _answer_round(orchestrator, lambda i: f"hr answer {i}")

    assert orchestrator.phase == "results"
    report = orchestrator.report
    assert report.recommendation == "Hire"
    assert report.results[0].score == pytest.approx(50.0)
    assert len(report.results) == 1 + 6 + 6

    assert len(recorder.entries) == 1
    user_id, entry = recorder.entries[0]
    assert user_id == "u1"
    assert entry.type.value == "mock"
    assert entry.score_rating == "Hire"
    ref = entry.data_reference
    assert ref["questions_answered"] == 13
    assert len(ref["q_and_a_list"]) == 12
    assert ref["q_and_a_list"][-1]["feedback_summary"] == "x" * 150 + "..."

    # A late timer expiry does not finalize twice
    await orchestrator.handle_timeout()
    assert len(recorder.entries) == 1
    assert ai.report_calls == 1


@pytest.mark.asyncio
async def test_timeout_in_technical_round_keeps_partial_results(orchestrator, recorder):
    await orchestrator.start()
    await _answer_round(orchestrator, lambda i: "a")
    orchestrator.answer("first technical answer")
    await orchestrator.proceed()
    orchestrator.answer("second technical answer")

    report = await orchestrator.handle_timeout()

    assert report.ended_by_timeout is True
    types = [r.type for r in report.results]
    assert types == ["Aptitude", "Technical", "Technical"]
    assert "HR" not in types
    assert all(r.feedback == NOT_EVALUATED_FEEDBACK for r in report.results[1:])
    assert len(recorder.entries) == 1

    await orchestrator.finalize()
    assert len(recorder.entries) == 1


@pytest.mark.asyncio
async def test_timeout_in_aptitude_scores_over_all_questions(orchestrator):
    await orchestrator.start()
    for _ in range(3):
        orchestrator.answer("a")
        await orchestrator.proceed()

    report = await orchestrator.handle_timeout()
    assert len(report.results) == 1
    assert report.results[0].correct_answers == 3
    assert report.results[0].total == 30
    assert report.results[0].score == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_feedback_failure_keeps_the_round_open(orchestrator, ai, recorder):
    await orchestrator.start()
    await _answer_round(orchestrator, lambda i: "a")
    await _answer_round(orchestrator, lambda i: f"answer {i}", stop_before_last=True)

    ai.feedback_error = AIServiceError("rate limited")
    with pytest.raises(RoundTransitionError):
        await orchestrator.proceed()
    assert orchestrator.current_round == RoundTypeEnum.TECHNICAL
    assert orchestrator.question_index == 5
    assert [r.type for r in orchestrator.results] == ["Aptitude"]

    ai.feedback_error = None
    await orchestrator.proceed()
    assert orchestrator.current_round == RoundTypeEnum.HR
    assert len(orchestrator.results) == 7
    assert recorder.entries == []
    orchestrator.stop()


@pytest.mark.asyncio
async def test_proceed_requires_an_answer(orchestrator):
    await orchestrator.start()
    with pytest.raises(QuizStateError):
        await orchestrator.proceed()
    orchestrator.stop()


@pytest.mark.asyncio
async def test_question_service_failure_falls_back_to_generic_bank(orchestrator, ai):
    ai.question_error = AIServiceError("unreachable")
    await orchestrator.start()
    await _answer_round(orchestrator, lambda i: "a")
    assert orchestrator.current_round == RoundTypeEnum.TECHNICAL
    assert len(orchestrator.questions[RoundTypeEnum.TECHNICAL]) == 6
    assert not orchestrator.questions[RoundTypeEnum.TECHNICAL][0].startswith("T")
    orchestrator.stop()


@pytest.mark.asyncio
async def test_report_failure_and_save_failure(ai, recorder):
    async def _report_down(results, role, company_tier):
        raise AIServiceError("down")

    ai.overall_report = _report_down
    recorder.error = SQLAlchemyError("db down")
    orch = MockInterviewOrchestrator(
        user_id="u1", role="Data Scientist", company_tier="FAANG / Top Tier", duration_minutes=60,
        ai=ai, recorder=recorder,
    )
    await orch.start()
    report = await orch.handle_timeout()
    assert report.recommendation == FAILED_REPORT.recommendation == "N/A"
    assert report.saved is False


@pytest.mark.asyncio
async def test_stop_discards_without_history(ai, recorder):
    service = MockInterviewService(LiveSessionRegistry(), ai, recorder)
    state = await service.start("u1", "Frontend Developer", "High-Growth Startup", 45)
    assert state.phase == "active"
    assert state.question.options == ["a", "b", "c", "d"]

    await service.stop("u1")
    assert recorder.entries == []
    with pytest.raises(QuizStateError):
        await service.get_state("u1")


@pytest.mark.asyncio
async def test_countdown_timer_fires_once():
    fired = []

    async def _expire():
        fired.append(True)

    timer = CountdownTimer(0.01, _expire)
    timer.start()
    await asyncio.sleep(0.05)
    assert fired == [True]
    assert timer.expired is True
    assert timer.remaining() == 0.0


@pytest.mark.asyncio
async def test_timer_expiry_while_waiting_for_the_next_round(ai, recorder):
    ai.question_limit = 1
    ai.technical_gate = asyncio.Event()
    orch = MockInterviewOrchestrator(
        user_id="u1", role="Backend Developer", company_tier="High-Growth Startup",
        duration_minutes=45, ai=ai, recorder=recorder,
    )
    orch.duration_seconds = 0.2
    await orch.start()
    orch.answer("a")

    # Blocks on the technical fetch until the timer finalises the interview
    await orch.proceed()

    assert orch.phase == "results"
    assert orch.report is not None
    assert orch.report.ended_by_timeout is True
    assert [r.type for r in orch.report.results] == ["Aptitude"]
    assert orch.report.results[0].score == pytest.approx(100.0)
    assert len(recorder.entries) == 1
    assert orch.state_out().phase == "results"


@pytest.mark.asyncio
async def test_round_transition_waits_for_a_slow_fetch(ai, recorder):
    ai.question_limit = 1
    ai.technical_gate = asyncio.Event()
    orch = MockInterviewOrchestrator(
        user_id="u1", role="Backend Developer", company_tier="High-Growth Startup",
        duration_minutes=45, ai=ai, recorder=recorder,
    )
    await orch.start()
    assert orch.next_round_ready is False
    orch.answer("a")

    transition = asyncio.create_task(orch.proceed())
    await asyncio.sleep(0.05)
    assert not transition.done()
    assert orch.current_round == RoundTypeEnum.APTITUDE

    ai.technical_gate.set()
    await transition
    assert orch.current_round == RoundTypeEnum.TECHNICAL
    assert orch.questions[RoundTypeEnum.TECHNICAL] == ["T0"]
    assert [r.type for r in orch.results] == ["Aptitude"]
    orch.stop()


@pytest.mark.asyncio
async def test_failed_fetch_is_restarted_on_retry(ai, recorder):
    ai.question_limit = 1
    orch = MockInterviewOrchestrator(
        user_id="u1", role="Backend Developer", company_tier="High-Growth Startup",
        duration_minutes=45, ai=ai, recorder=recorder,
    )
    ai.question_error = RuntimeError("connection reset")
    await orch.start()
    orch.answer("a")
    with pytest.raises(RoundTransitionError):
        await orch.proceed()
    assert orch.current_round == RoundTypeEnum.APTITUDE
    assert orch.results == []

    ai.question_error = None
    await orch.proceed()
    assert orch.current_round == RoundTypeEnum.TECHNICAL
    orch.stop()


@pytest.mark.asyncio
async def test_countdown_timer_finalises_the_interview(ai, recorder):
    service = MockInterviewService(LiveSessionRegistry(), ai, recorder)
    await service.start("u1", "Backend Developer", "High-Growth Startup", 45)
    orch = service._registry.get(MOCK_INTERVIEW, "u1")
    orch._timer.cancel()
    orch._timer = CountdownTimer(0.05, orch.handle_timeout)
    orch._timer.start()
    orch.answer("a")

    await asyncio.sleep(0.2)

    state = await service.get_state("u1")
    assert state.phase == "results"
    assert state.report.ended_by_timeout is True
    assert state.time_left_seconds == 0.0
    assert len(recorder.entries) == 1
    with pytest.raises(QuizStateError):
        await service.proceed("u1")


@pytest.mark.asyncio
async def test_stopped_interview_reports_a_terminal_phase(orchestrator, recorder):
    await orchestrator.start()
    orchestrator.stop()

    state = orchestrator.state_out()
    assert state.phase == "stopped"
    assert state.round is None
    with pytest.raises(QuizStateError):
        orchestrator.answer("a")
    assert recorder.entries == []
