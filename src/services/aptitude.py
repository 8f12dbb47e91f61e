"""Aptitude quizzes: practice and diagnostic sessions, scoring and performance analysis.

A running quiz is an :class:`AptitudeQuizSession` kept in the live-session
registry. It can be snapshotted into the resume cache (page unload) and
restored later with its timer baseline reset to the moment of resumption.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Awaitable, Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError

from src.config.manager import settings
from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.aptitude import (
    ALL_TOPICS_LABEL,
    APTITUDE_SUB_TOPICS,
    AptitudeQuestion,
    Difficulty,
    QuizAnalysis,
    QuizQuestionOut,
    QuizResultOut,
    QuizStateOut,
    QuizStepResponse,
    QuizType,
    SavedQuizState,
    SavedQuizSummary,
    SpeedAccuracyMatrix,
    TopicBreakdownItem,
)
from src.models.schemas.history import HistoryCreate
from src.services import llm
from src.services.llm import LLMResult
from src.services.progress import ProgressService
from src.services.quiz_cache import QuizResumeCache
from src.services.registry import APTITUDE_QUIZ, LiveSessionRegistry
from src.services.static_questions import get_static_aptitude_questions
from src.utilities.exceptions.domain import AIServiceError, InvalidQuizSelectionError, QuizStateError

logger = logging.getLogger(__name__)

DIAGNOSTIC_TOPIC = "Diagnostic Test"
MIXED_TOPICS = "Mixed Topics"
DEFAULT_QUIZ_TOPIC = "Aptitude Test"
DIAGNOSTIC_QUESTION_COUNT = 30
DIAGNOSTIC_TIME_LIMIT_SECONDS = 40 * 60
SECONDS_PER_QUESTION: dict[str, int] = {"Easy": 75, "Medium": 90, "Hard": 120, "Mixed": 120}
ACCURACY_THRESHOLD = 60.0
SLOW_FACTOR = 1.1
DEFAULT_AVERAGE_TIME = 60.0
NOT_ANSWERED = "Not Answered"

QuestionSource = Callable[[list[str], int, str], Awaitable[LLMResult[list[AptitudeQuestion]]]]


def effective_sub_topics(sub_topics: Sequence[str]) -> list[str]:
    """Drop the "All Topics" marker and duplicates, keeping the selection order."""
    seen: list[str] = []
    for sub in sub_topics:
        if sub != ALL_TOPICS_LABEL and sub not in seen:
            seen.append(sub)
    return seen


def all_sub_topics() -> list[str]:
    return [sub for subs in APTITUDE_SUB_TOPICS.values() for sub in subs]


def derive_quiz_topic(sub_topics: Sequence[str]) -> str:
    parents = {topic.value for topic, subs in APTITUDE_SUB_TOPICS.items() if any(s in subs for s in sub_topics)}
    if len(parents) > 1:
        return MIXED_TOPICS
    if parents:
        return parents.pop()
    return DEFAULT_QUIZ_TOPIC


def practice_time_limit(question_count: int, difficulty: str) -> int:
    return question_count * SECONDS_PER_QUESTION.get(difficulty, SECONDS_PER_QUESTION["Mixed"])


def recommended_difficulty(score: float) -> Difficulty:
    if score < 40:
        return "Easy"
    if score > 80:
        return "Hard"
    return "Medium"


def count_correct(questions: Sequence[AptitudeQuestion], answers: Sequence[str | None]) -> int:
    return sum(1 for i, q in enumerate(questions) if i < len(answers) and answers[i] == q.correct_answer)


def analyze_performance(
    questions: Sequence[AptitudeQuestion], answers: Sequence[str | None], times: Sequence[float]
) -> QuizAnalysis:
    """Per-sub-topic accuracy and average time, placed on a speed/accuracy grid.

    A sub-topic is "accurate" at >= 60% and "fast" when its average time is
    within 1.1x the quiz's average time over questions that took any time.
    """
    stats: dict[str, dict[str, list[float] | int]] = {}
    for i, question in enumerate(questions):
        sub = question.sub_topic or "General"
        entry = stats.setdefault(sub, {"correct": 0, "total": 0, "times": []})
        if i < len(answers) and answers[i] == question.correct_answer:
            entry["correct"] += 1  # type: ignore[operator]
        entry["total"] += 1  # type: ignore[operator]
        entry["times"].append(times[i] if i < len(times) else 0.0)  # type: ignore[union-attr]

    breakdown = []
    for sub, entry in stats.items():
        sub_times: list[float] = entry["times"]  # type: ignore[assignment]
        breakdown.append(
            TopicBreakdownItem(
                sub_topic=sub,
                correct=int(entry["correct"]),  # type: ignore[arg-type]
                total=int(entry["total"]),  # type: ignore[arg-type]
                accuracy=int(entry["correct"]) / int(entry["total"]) * 100,  # type: ignore[arg-type]
                avg_time=sum(sub_times) / len(sub_times),
            )
        )

    spent = [t for t in times if t > 0]
    overall_avg = sum(spent) / len(spent) if spent else DEFAULT_AVERAGE_TIME
    matrix = SpeedAccuracyMatrix()
    for item in breakdown:
        fast = item.avg_time <= overall_avg * SLOW_FACTOR
        if item.accuracy >= ACCURACY_THRESHOLD:
            (matrix.fast_accurate if fast else matrix.slow_accurate).append(item.sub_topic)
        else:
            (matrix.fast_inaccurate if fast else matrix.slow_inaccurate).append(item.sub_topic)

    return QuizAnalysis(
        topic_breakdown=breakdown,
        speed_accuracy=matrix,
        focus_sub_topics=[*matrix.slow_inaccurate, *matrix.fast_inaccurate, *matrix.slow_accurate],
    )


class AptitudeQuizSession:
    """One running quiz: questions, answers, navigation and the countdown."""

    def __init__(
        self,
        *,
        questions: list[AptitudeQuestion],
        topic: str,
        difficulty: Difficulty,
        quiz_type: QuizType,
        time_limit_seconds: float | None,
        num_questions: int | None = None,
        user_answers: list[str | None] | None = None,
        current_index: int = 0,
        time_per_question: list[float] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not questions:
            raise QuizStateError("A quiz needs at least one question")
        self.session_id = uuid.uuid4().hex
        self.questions = questions
        self.topic = topic
        self.difficulty = difficulty
        self.quiz_type = quiz_type
        self.num_questions = num_questions or len(questions)
        self.user_answers: list[str | None] = list(user_answers or [None] * len(questions))
        self.time_per_question: list[float] = list(time_per_question or [0.0] * len(questions))
        self.current_index = min(max(0, current_index), len(questions) - 1)
        self._clock = clock
        self._question_started = clock()
        self._deadline = None if time_limit_seconds is None else self._question_started + time_limit_seconds
        self.finished = False

    @classmethod
    def from_snapshot(cls, state: SavedQuizState, clock: Callable[[], float] = time.monotonic) -> "AptitudeQuizSession":
        return cls(
            questions=list(state.questions),
            topic=state.topic,
            difficulty=state.selected_difficulty,
            quiz_type=state.quiz_type,
            time_limit_seconds=state.time_left,
            num_questions=state.num_questions,
            user_answers=list(state.user_answers),
            current_index=state.current_question_index,
            time_per_question=list(state.time_per_question),
            clock=clock,
        )

    def time_left(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.time_left()
        return remaining is not None and remaining <= 0

    def _ensure_running(self) -> None:
        if self.finished:
            raise QuizStateError("The quiz has already been submitted")

    def _record_time(self) -> None:
        now = self._clock()
        self.time_per_question[self.current_index] += max(0.0, now - self._question_started)
        self._question_started = now

    def answer(self, answer: str) -> None:
        self._ensure_running()
        question = self.questions[self.current_index]
        if question.options and answer not in question.options:
            raise QuizStateError("Answer must be one of the question's options")
        self.user_answers[self.current_index] = answer

    def next(self) -> bool:
        """Move forward; returns False when already on the last question."""
        self._ensure_running()
        self._record_time()
        if self.current_index >= len(self.questions) - 1:
            return False
        self.current_index += 1
        return True

    def previous(self) -> None:
        self._ensure_running()
        if self.current_index > 0:
            self._record_time()
            self.current_index -= 1

    def finish(self) -> None:
        self._ensure_running()
        self._record_time()
        self.finished = True

    def snapshot(self) -> SavedQuizState:
        self._ensure_running()
        self._record_time()
        return SavedQuizState(
            questions=self.questions,
            user_answers=self.user_answers,
            current_question_index=self.current_index,
            time_left=self.time_left(),
            topic=self.topic,
            selected_difficulty=self.difficulty,
            num_questions=self.num_questions,
            time_per_question=self.time_per_question,
            quiz_type=self.quiz_type,
        )

    def state_out(self) -> QuizStateOut:
        question = self.questions[self.current_index]
        return QuizStateOut(
            topic=self.topic,
            quiz_type=self.quiz_type,
            difficulty=self.difficulty,
            current_question_index=self.current_index,
            total_questions=len(self.questions),
            question=QuizQuestionOut(question=question.question, options=question.options, sub_topic=question.sub_topic),
            selected_answer=self.user_answers[self.current_index],
            answered=sum(1 for a in self.user_answers if a is not None),
            time_left=self.time_left(),
        )

    def result(self) -> QuizResultOut:
        total = len(self.questions)
        correct = count_correct(self.questions, self.user_answers)
        score = correct / total * 100
        return QuizResultOut(
            score=score,
            total=total,
            correct_answers=correct,
            incorrect_answers=total - correct,
            topic=self.topic,
            difficulty=self.difficulty,
            quiz_type=self.quiz_type,
            questions=self.questions,
            user_answers=self.user_answers,
            time_per_question=self.time_per_question,
            recommended_difficulty=recommended_difficulty(score),
            analysis=analyze_performance(self.questions, self.user_answers, self.time_per_question),
        )

    def history_entry(self, result: QuizResultOut) -> HistoryCreate:
        return HistoryCreate(
            type=HistoryTypeEnum.APTITUDE,
            session_id=self.session_id,
            duration_seconds=sum(result.time_per_question),
            score_rating=result.score,
            summary=(
                f"Completed a {result.difficulty} {result.topic} quiz, "
                f"scoring {result.correct_answers}/{result.total}."
            ),
            data_reference={
                "topic": result.topic,
                "difficulty": result.difficulty,
                "quiz_type": result.quiz_type,
                "questions_answered": result.total,
                "q_and_a_list": [
                    {
                        "question": q.question,
                        "answer": result.user_answers[i] or NOT_ANSWERED,
                        "feedback_summary": (
                            "Correct"
                            if result.user_answers[i] == q.correct_answer
                            else f"Incorrect. Correct answer was {q.correct_answer}."
                        ),
                    }
                    for i, q in enumerate(result.questions)
                ],
            },
        )


class AptitudeQuizService:
    """Per-user quiz flow on top of the live-session registry and the resume cache."""

    def __init__(
        self,
        progress: ProgressService,
        cache: QuizResumeCache,
        registry: LiveSessionRegistry,
        question_source: QuestionSource = llm.generate_aptitude_questions,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._progress = progress
        self._cache = cache
        self._registry = registry
        self._question_source = question_source
        self._clock = clock

    async def _fetch_questions(self, sub_topics: list[str], count: int, difficulty: str) -> list[AptitudeQuestion]:
        try:
            result = await self._question_source(sub_topics, count, difficulty)
        except AIServiceError:
            result = None
        if result is not None and result.ok:
            return result.value  # type: ignore[return-value]
        logger.warning("Falling back to static aptitude questions (%s)", result.error if result else "service error")
        return get_static_aptitude_questions(count, sub_topics)

    async def _begin(self, user_id: str, session: AptitudeQuizSession) -> QuizStateOut:
        await self._cache.discard(user_id)
        self._registry.cleanup_idle(settings.LIVE_SESSION_TTL_SECONDS)
        self._registry.put(APTITUDE_QUIZ, user_id, session)
        logger.info("User %s started a %s quiz on %s", user_id, session.quiz_type, session.topic)
        return session.state_out()

    async def start_practice(
        self, user_id: str, sub_topics: Sequence[str], count: int, difficulty: Difficulty
    ) -> QuizStateOut:
        selected = effective_sub_topics(sub_topics)
        if not selected:
            raise InvalidQuizSelectionError("Please select at least one sub-topic to start the quiz.")
        unknown = [s for s in selected if s not in all_sub_topics()]
        if unknown:
            raise InvalidQuizSelectionError(f"Unknown sub-topics: {', '.join(unknown)}")

        questions = await self._fetch_questions(selected, count, difficulty)
        session = AptitudeQuizSession(
            questions=questions,
            topic=derive_quiz_topic(selected),
            difficulty=difficulty,
            quiz_type="Practice",
            time_limit_seconds=practice_time_limit(len(questions), difficulty),
            num_questions=count,
            clock=self._clock,
        )
        return await self._begin(user_id, session)

    async def start_diagnostic(self, user_id: str) -> QuizStateOut:
        questions = await self._fetch_questions(all_sub_topics(), DIAGNOSTIC_QUESTION_COUNT, "Mixed")
        session = AptitudeQuizSession(
            questions=questions,
            topic=DIAGNOSTIC_TOPIC,
            difficulty="Mixed",
            quiz_type="Diagnostic",
            time_limit_seconds=DIAGNOSTIC_TIME_LIMIT_SECONDS,
            num_questions=DIAGNOSTIC_QUESTION_COUNT,
            clock=self._clock,
        )
        return await self._begin(user_id, session)

    def _live(self, user_id: str) -> AptitudeQuizSession:
        session = self._registry.get(APTITUDE_QUIZ, user_id)
        if session is None:
            raise QuizStateError("No quiz in progress")
        return session

    def get_state(self, user_id: str) -> QuizStateOut:
        return self._live(user_id).state_out()

    async def _step(self, user_id: str, action: Callable[[AptitudeQuizSession], bool]) -> QuizStepResponse:
        session = self._live(user_id)
        if session.expired:
            logger.info("Quiz time ran out for user %s; submitting", user_id)
            return QuizStepResponse(finished=True, result=await self._submit(user_id, session))
        if not action(session):
            return QuizStepResponse(finished=True, result=await self._submit(user_id, session))
        return QuizStepResponse(finished=False, state=session.state_out())

    async def answer(self, user_id: str, answer: str) -> QuizStepResponse:
        def _do(session: AptitudeQuizSession) -> bool:
            session.answer(answer)
            return True

        return await self._step(user_id, _do)

    async def next(self, user_id: str) -> QuizStepResponse:
        """Advance; on the last question this submits the quiz."""
        return await self._step(user_id, lambda session: session.next())

    async def previous(self, user_id: str) -> QuizStepResponse:
        def _do(session: AptitudeQuizSession) -> bool:
            session.previous()
            return True

        return await self._step(user_id, _do)

    async def submit(self, user_id: str) -> QuizResultOut:
        return await self._submit(user_id, self._live(user_id))

    async def _submit(self, user_id: str, session: AptitudeQuizSession) -> QuizResultOut:
        session.finish()
        self._registry.pop(APTITUDE_QUIZ, user_id)
        await self._cache.discard(user_id)
        result = session.result()
        try:
            await self._progress.record_session(user_id, session.history_entry(result))
        except SQLAlchemyError as e:
            logger.exception("Failed to save quiz result for user %s", user_id)
            await self._progress.rollback()
            result = result.model_copy(update={"saved": False, "save_error": str(e)})
        return result

    async def suspend(self, user_id: str) -> SavedQuizState:
        """Snapshot the running quiz into the resume slot and drop it from memory."""
        session = self._live(user_id)
        state = session.snapshot()
        await self._cache.save(user_id, state)
        self._registry.pop(APTITUDE_QUIZ, user_id)
        return state

    async def resume(self, user_id: str) -> QuizStateOut:
        state = await self._cache.take(user_id)
        if state is None:
            raise QuizStateError("No saved quiz to resume")
        session = AptitudeQuizSession.from_snapshot(state, clock=self._clock)
        self._registry.put(APTITUDE_QUIZ, user_id, session)
        return session.state_out()

    async def saved_summary(self, user_id: str) -> SavedQuizSummary:
        return await self._cache.summary(user_id)

    async def abandon(self, user_id: str) -> None:
        """Stop the running quiz (if any) and clear the resume slot without saving."""
        self._registry.pop(APTITUDE_QUIZ, user_id)
        await self._cache.discard(user_id)

    async def improvement_suggestions(self, analysis: QuizAnalysis) -> str:
        matrix = analysis.speed_accuracy
        if not (matrix.slow_inaccurate or matrix.fast_inaccurate or matrix.slow_accurate):
            return ""
        return await llm.generate_improvement_suggestions(
            matrix.slow_inaccurate, matrix.fast_inaccurate, matrix.slow_accurate
        )
