"""Three-round mock interview: Aptitude -> Technical -> HR under one global timer.

Only the Aptitude questions are fetched before the interview starts; the
Technical and HR sets are fetched together in a background task and joined
when the Aptitude round ends. The interview is finalised exactly once, by
whichever comes first: the last round completing or the timer running out.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError

from src.config.manager import settings
from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.aptitude import AptitudeQuestion
from src.models.schemas.history import HistoryCreate
from src.models.schemas.mock_interview import (
    AptitudeRoundResult,
    ConversationRoundResult,
    MockInterviewReport,
    MockInterviewStateOut,
    MockQuestionOut,
    RoundTypeEnum,
)
from src.services.llm import FAILED_REPORT, FEEDBACK_PLACEHOLDER, LLMResult, OverallReportLLM
from src.services.registry import MOCK_INTERVIEW, LiveSessionRegistry
from src.services.static_questions import (
    get_static_aptitude_questions,
    get_static_hr_questions,
    get_static_technical_questions,
)
from src.utilities.exceptions.domain import AIServiceError, QuizStateError, RoundTransitionError

logger = logging.getLogger(__name__)

ROUND_SEQUENCE: tuple[RoundTypeEnum, ...] = (RoundTypeEnum.APTITUDE, RoundTypeEnum.TECHNICAL, RoundTypeEnum.HR)
ROUND_QUESTION_COUNT: dict[RoundTypeEnum, int] = {
    RoundTypeEnum.APTITUDE: 30,
    RoundTypeEnum.TECHNICAL: 6,
    RoundTypeEnum.HR: 6,
}
NOT_EVALUATED_FEEDBACK = "Not evaluated: the interview ended before this round was reviewed."
FEEDBACK_SUMMARY_LENGTH = 150

HistoryRecorder = Callable[[str, HistoryCreate], Awaitable[Any]]


class InterviewAI(Protocol):
    async def aptitude_questions(self, count: int) -> LLMResult[list[AptitudeQuestion]]: ...

    async def technical_questions(self, role: str, company_tier: str, count: int) -> LLMResult[list[str]]: ...

    async def hr_questions(self, count: int) -> LLMResult[list[str]]: ...

    async def technical_feedback(self, conversation: list[tuple[str, str]], role: str) -> list[str]: ...

    async def hr_feedback(self, conversation: list[tuple[str, str]]) -> list[str]: ...

    async def overall_report(self, results: list[dict[str, Any]], role: str, company_tier: str) -> OverallReportLLM: ...


class CountdownTimer:
    """Cancellable countdown that awaits ``on_expire`` once when it reaches zero."""

    def __init__(
        self,
        seconds: float,
        on_expire: Callable[[], Awaitable[Any]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._seconds = float(seconds)
        self._on_expire = on_expire
        self._clock = clock
        self._deadline: float | None = None
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        self._deadline = self._clock() + self._seconds
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        await asyncio.sleep(self._seconds)
        try:
            await self._on_expire()
        except Exception:  # noqa: BLE001
            logger.exception("Countdown expiry handler failed")

    def remaining(self) -> float:
        if self._deadline is None:
            return self._seconds
        return max(0.0, self._deadline - self._clock())

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self.remaining() <= 0

    def cancel(self) -> None:
        # The expiry handler may cancel its own timer while finishing up
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()


def _truncate(text: str, limit: int = FEEDBACK_SUMMARY_LENGTH) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class MockInterviewOrchestrator:
    def __init__(
        self,
        *,
        user_id: str,
        role: str,
        company_tier: str,
        duration_minutes: int,
        ai: InterviewAI,
        recorder: HistoryRecorder,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.user_id = user_id
        self.role = role
        self.company_tier = company_tier
        self.duration_seconds = duration_minutes * 60
        self._ai = ai
        self._recorder = recorder
        self._clock = clock

        self.phase = "setup"
        self.round_index = 0
        self.question_index = 0
        self.questions: dict[RoundTypeEnum, list[Any]] = {}
        self.answers: dict[RoundTypeEnum, list[str | None]] = {}
        self.results: list[AptitudeRoundResult | ConversationRoundResult] = []
        self.report: MockInterviewReport | None = None

        self._started_at: float | None = None
        self._timer: CountdownTimer | None = None
        self._background: asyncio.Task | None = None
        self._transition_lock = asyncio.Lock()
        self._finalize_lock = asyncio.Lock()
        self._finalized = False

    @property
    def current_round(self) -> RoundTypeEnum | None:
        if self.phase != "active":
            return None
        return ROUND_SEQUENCE[self.round_index]

    def time_left(self) -> float:
        if self._timer is None:
            return float(self.duration_seconds)
        return self._timer.remaining()

    @property
    def timed_out(self) -> bool:
        return self._timer is not None and self._timer.expired

    @property
    def next_round_ready(self) -> bool:
        task = self._background
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    async def _load_aptitude(self) -> list[AptitudeQuestion]:
        count = ROUND_QUESTION_COUNT[RoundTypeEnum.APTITUDE]
        try:
            result = await self._ai.aptitude_questions(count)
        except AIServiceError:
            result = None
        if result is not None and result.ok:
            return result.value  # type: ignore[return-value]
        logger.warning("Mock interview %s: using the generic aptitude bank", self.session_id)
        return get_static_aptitude_questions(count)

    async def _load_technical(self) -> list[str]:
        count = ROUND_QUESTION_COUNT[RoundTypeEnum.TECHNICAL]
        try:
            result = await self._ai.technical_questions(self.role, self.company_tier, count)
        except AIServiceError:
            result = None
        if result is not None and result.ok:
            return result.value  # type: ignore[return-value]
        logger.warning("Mock interview %s: using the generic technical bank", self.session_id)
        return get_static_technical_questions(count)

    async def _load_hr(self) -> list[str]:
        count = ROUND_QUESTION_COUNT[RoundTypeEnum.HR]
        try:
            result = await self._ai.hr_questions(count)
        except AIServiceError:
            result = None
        if result is not None and result.ok:
            return result.value  # type: ignore[return-value]
        logger.warning("Mock interview %s: using the generic HR bank", self.session_id)
        return get_static_hr_questions(count)

    async def _fetch_later_rounds(self) -> None:
        technical, hr = await asyncio.gather(self._load_technical(), self._load_hr())
        self.questions[RoundTypeEnum.TECHNICAL] = technical
        self.answers[RoundTypeEnum.TECHNICAL] = [None] * len(technical)
        self.questions[RoundTypeEnum.HR] = hr
        self.answers[RoundTypeEnum.HR] = [None] * len(hr)

    def _background_fetch(self) -> asyncio.Task:
        task = self._background
        if task is None or (task.done() and (task.cancelled() or task.exception() is not None)):
            if task is not None:
                logger.info("Mock interview %s: restarting the background question fetch", self.session_id)
            task = asyncio.create_task(self._fetch_later_rounds())
            self._background = task
        return task

    async def start(self) -> None:
        if self.phase != "setup":
            raise QuizStateError("The interview has already started")
        self._started_at = self._clock()
        aptitude = await self._load_aptitude()
        self.questions[RoundTypeEnum.APTITUDE] = aptitude
        self.answers[RoundTypeEnum.APTITUDE] = [None] * len(aptitude)
        self.round_index = 0
        self.question_index = 0
        self.phase = "active"
        self._background_fetch()
        self._timer = CountdownTimer(self.duration_seconds, self.handle_timeout, clock=self._clock)
        self._timer.start()
        logger.info("Mock interview %s started for user %s (%s, %s)", self.session_id, self.user_id, self.role, self.company_tier)

    def _require_active(self) -> RoundTypeEnum:
        if self.phase != "active":
            raise QuizStateError("The interview is not in progress")
        return ROUND_SEQUENCE[self.round_index]

    def answer(self, answer: str) -> None:
        round_type = self._require_active()
        if round_type == RoundTypeEnum.APTITUDE:
            question: AptitudeQuestion = self.questions[round_type][self.question_index]
            if question.options and answer not in question.options:
                raise QuizStateError("Answer must be one of the question's options")
        self.answers[round_type][self.question_index] = answer

    async def proceed(self) -> None:
        """Move to the next question; on a round's last question score it and open the next round.

        A failed evaluation or question fetch raises ``RoundTransitionError`` and
        leaves the interview on the same question so the user can retry.
        """
        if self.phase == "active" and self.timed_out:
            await self.handle_timeout()
            return
        round_type = self._require_active()
        current = self.answers[round_type][self.question_index]
        if current is None or not str(current).strip():
            raise QuizStateError("Answer the current question before continuing")

        if self.question_index < len(self.questions[round_type]) - 1:
            self.question_index += 1
            return

        async with self._transition_lock:
            if self.phase != "active" or ROUND_SEQUENCE[self.round_index] != round_type:
                return
            try:
                round_results = await self._evaluate_round(round_type)
            except AIServiceError as e:
                raise RoundTransitionError(f"Failed to process the {round_type.value} round. Please try again.") from e

            is_last_round = self.round_index == len(ROUND_SEQUENCE) - 1
            fetch: asyncio.Task | None = None
            if not is_last_round:
                fetch = self._background_fetch()
                # A fetch cancelled by finalisation is reported through the task, not raised here
                await asyncio.wait({fetch})

            # The timer may have finalised the interview while we were waiting
            if self.phase != "active":
                await self.finalize()
                return
            if fetch is not None and (fetch.cancelled() or fetch.exception() is not None):
                error = None if fetch.cancelled() else fetch.exception()
                logger.error(
                    "Mock interview %s: background question fetch failed", self.session_id, exc_info=error
                )
                raise RoundTransitionError("Failed to load the next round. Please try again.") from error
            self.results.extend(round_results)
            if is_last_round:
                await self.finalize()
            else:
                self.round_index += 1
                self.question_index = 0

    async def _evaluate_round(self, round_type: RoundTypeEnum) -> list[AptitudeRoundResult | ConversationRoundResult]:
        if round_type == RoundTypeEnum.APTITUDE:
            return [self._score_aptitude()]
        conversation = [
            (question, answer or "")
            for question, answer in zip(self.questions[round_type], self.answers[round_type])
        ]
        if round_type == RoundTypeEnum.TECHNICAL:
            feedbacks = await self._ai.technical_feedback(conversation, self.role)
        else:
            feedbacks = await self._ai.hr_feedback(conversation)
        return [
            ConversationRoundResult(type=round_type.value, question=q, answer=a, feedback=feedbacks[i] if i < len(feedbacks) else FEEDBACK_PLACEHOLDER)  # type: ignore[arg-type]
            for i, (q, a) in enumerate(conversation)
        ]

    def _score_aptitude(self) -> AptitudeRoundResult:
        questions: list[AptitudeQuestion] = self.questions[RoundTypeEnum.APTITUDE]
        answers = self.answers[RoundTypeEnum.APTITUDE]
        correct = sum(1 for q, a in zip(questions, answers) if a == q.correct_answer)
        total = len(questions)
        return AptitudeRoundResult(score=correct / total * 100 if total else 0.0, total=total, correct_answers=correct)

    def _partial_round_results(self) -> list[AptitudeRoundResult | ConversationRoundResult]:
        round_type = ROUND_SEQUENCE[self.round_index]
        if round_type == RoundTypeEnum.APTITUDE:
            return [self._score_aptitude()]
        return [
            ConversationRoundResult(type=round_type.value, question=q, answer=a, feedback=NOT_EVALUATED_FEEDBACK)  # type: ignore[arg-type]
            for q, a in zip(self.questions.get(round_type, []), self.answers.get(round_type, []))
            if a and a.strip()
        ]

    async def handle_timeout(self) -> MockInterviewReport | None:
        return await self.finalize(ended_by_timeout=True)

    async def finalize(self, ended_by_timeout: bool = False) -> MockInterviewReport | None:
        async with self._finalize_lock:
            if self._finalized:
                return self.report
            self._finalized = True

            if ended_by_timeout and self.phase == "active":
                self.results.extend(self._partial_round_results())
            self.phase = "results"
            if self._timer is not None:
                self._timer.cancel()
            if self._background is not None and not self._background.done():
                self._background.cancel()

            results = list(self.results)
            try:
                overall = await self._ai.overall_report([r.model_dump() for r in results], self.role, self.company_tier)
            except AIServiceError:
                overall = FAILED_REPORT
            elapsed = self._clock() - self._started_at if self._started_at is not None else float(self.duration_seconds)

            report = MockInterviewReport(
                recommendation=overall.recommendation,
                summary=overall.summary,
                report=overall.report,
                results=results,
                ended_by_timeout=ended_by_timeout,
                duration_seconds=elapsed,
            )
            try:
                await self._recorder(self.user_id, self._history_entry(report))
            except SQLAlchemyError as e:
                logger.exception("Mock interview %s: failed to save history", self.session_id)
                report = report.model_copy(update={"saved": False, "save_error": str(e)})
            self.report = report
            logger.info("Mock interview %s finished (%s)", self.session_id, "timeout" if ended_by_timeout else "completed")
            return report

    def _history_entry(self, report: MockInterviewReport) -> HistoryCreate:
        return HistoryCreate(
            type=HistoryTypeEnum.MOCK,
            session_id=self.session_id,
            duration_seconds=report.duration_seconds,
            score_rating=report.recommendation,
            summary=report.summary,
            data_reference={
                "role": self.role,
                "company_tier": self.company_tier,
                "questions_answered": len(report.results),
                "q_and_a_list": [
                    {
                        "question": r.question,
                        "answer": r.answer,
                        "feedback_summary": _truncate(r.feedback or "No feedback available."),
                    }
                    for r in report.results
                    if isinstance(r, ConversationRoundResult)
                ],
                "full_report": report.report,
            },
        )

    def stop(self) -> None:
        """Abandon the interview: no report, no history record."""
        self._finalized = True
        if self.phase in ("setup", "active"):
            self.phase = "stopped"
        if self._timer is not None:
            self._timer.cancel()
        if self._background is not None and not self._background.done():
            self._background.cancel()
        logger.info("Mock interview %s stopped by user %s", self.session_id, self.user_id)

    def state_out(self) -> MockInterviewStateOut:
        round_type = self.current_round
        question_out = None
        current_answer = None
        round_count = 0
        if round_type is not None:
            questions = self.questions.get(round_type, [])
            round_count = len(questions)
            if questions:
                question = questions[self.question_index]
                if isinstance(question, AptitudeQuestion):
                    question_out = MockQuestionOut(text=question.question, options=question.options)
                else:
                    question_out = MockQuestionOut(text=question)
                current_answer = self.answers[round_type][self.question_index]
        return MockInterviewStateOut(
            session_id=self.session_id,
            phase=self.phase,  # type: ignore[arg-type]
            role=self.role,
            company_tier=self.company_tier,
            round=round_type,
            round_index=self.round_index,
            question_index=self.question_index,
            round_question_count=round_count,
            question=question_out,
            current_answer=current_answer,
            time_left_seconds=self.time_left() if self.phase == "active" else 0.0,
            next_round_ready=self.next_round_ready,
            results=self.results if self.phase == "results" else [],
            report=self.report,
        )


class MockInterviewService:
    """Per-user entry point used by the API routes."""

    def __init__(self, registry: LiveSessionRegistry, ai: InterviewAI, recorder: HistoryRecorder) -> None:
        self._registry = registry
        self._ai = ai
        self._recorder = recorder

    async def start(self, user_id: str, role: str, company_tier: str, duration_minutes: int) -> MockInterviewStateOut:
        self._registry.cleanup_idle(settings.LIVE_SESSION_TTL_SECONDS)
        previous: MockInterviewOrchestrator | None = self._registry.pop(MOCK_INTERVIEW, user_id)
        if previous is not None and previous.phase == "active":
            previous.stop()
        orchestrator = MockInterviewOrchestrator(
            user_id=user_id,
            role=role,
            company_tier=company_tier,
            duration_minutes=duration_minutes,
            ai=self._ai,
            recorder=self._recorder,
        )
        await orchestrator.start()
        self._registry.put(MOCK_INTERVIEW, user_id, orchestrator)
        return orchestrator.state_out()

    def _live(self, user_id: str) -> MockInterviewOrchestrator:
        orchestrator = self._registry.get(MOCK_INTERVIEW, user_id)
        if orchestrator is None:
            raise QuizStateError("No mock interview in progress")
        return orchestrator

    async def get_state(self, user_id: str) -> MockInterviewStateOut:
        orchestrator = self._live(user_id)
        if orchestrator.phase == "active" and orchestrator.timed_out:
            await orchestrator.handle_timeout()
        return orchestrator.state_out()

    async def answer(self, user_id: str, answer: str) -> MockInterviewStateOut:
        orchestrator = self._live(user_id)
        if orchestrator.phase == "active" and orchestrator.timed_out:
            await orchestrator.handle_timeout()
            return orchestrator.state_out()
        orchestrator.answer(answer)
        return orchestrator.state_out()

    async def proceed(self, user_id: str) -> MockInterviewStateOut:
        orchestrator = self._live(user_id)
        await orchestrator.proceed()
        return orchestrator.state_out()

    async def stop(self, user_id: str) -> None:
        orchestrator = self._registry.pop(MOCK_INTERVIEW, user_id)
        if orchestrator is None:
            raise QuizStateError("No mock interview in progress")
        orchestrator.stop()
