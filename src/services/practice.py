"""Standalone practice modules: technical and HR interviews, group discussion and profile review.

Technical and HR practice are open-ended conversations: each answer gets one
follow-up question, and ending the session produces per-answer feedback plus a
session report that is written to history. A group discussion runs against a
deadline that is checked whenever the user speaks. A profile review is a
single request that is reviewed and recorded immediately.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError

from src.config.manager import settings
from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.history import GDChatMessage, HistoryCreate, QAItem
from src.models.schemas.practice import (
    ConversationTurn,
    DiscussionEndResponse,
    DiscussionStartRequest,
    DiscussionStateOut,
    DiscussionTopic,
    InterviewConfig,
    PracticeKindEnum,
    PracticeReport,
    PracticeStateOut,
    ProfileReviewOut,
    ProfileReviewRequest,
)
from src.services.llm import LLMResult, ProfileReviewLLM, SessionReportLLM
from src.services.progress import ProgressService
from src.services.registry import GROUP_DISCUSSION, HR_PRACTICE, TECHNICAL_PRACTICE, LiveSessionRegistry
from src.services.static_questions import get_static_hr_questions, get_static_technical_questions
from src.utilities.exceptions.domain import AIServiceError, QuizStateError

logger = logging.getLogger(__name__)

SWITCH_GEARS_QUESTION = {
    PracticeKindEnum.TECHNICAL: "Let's switch gears. What's a recent technical challenge you faced and how did you overcome it?",
    PracticeKindEnum.HR: "Let's switch gears. Tell me about a time you had to adapt quickly to an unexpected change.",
}
MISSING_FEEDBACK = "N/A"

MODERATOR = "Moderator"
USER_PARTICIPANT = "You"
SYSTEM_PARTICIPANT = "System"
LOST_TRAIN_OF_THOUGHT = "I'm sorry, I seem to have lost my train of thought. Could you repeat your last point?"
CONNECTION_TROUBLE = "I'm having trouble connecting. Let's try again."
FALLBACK_DISCUSSION_TOPICS: list[DiscussionTopic] = [
    DiscussionTopic(
        topic="Success vs. Hard Work: Is one more important?",
        description="Debate whether talent and luck or sustained effort matter more for success.",
    ),
    DiscussionTopic(
        topic="The Future of Open Source Software",
        description="Discuss how open source will be funded, governed and used in the coming decade.",
    ),
    DiscussionTopic(
        topic="Gig Economy: Liberation or Exploitation?",
        description="Weigh the flexibility of gig work against its lack of security and benefits.",
    ),
]

_REGISTRY_KIND = {PracticeKindEnum.TECHNICAL: TECHNICAL_PRACTICE, PracticeKindEnum.HR: HR_PRACTICE}
_HISTORY_TYPE = {PracticeKindEnum.TECHNICAL: HistoryTypeEnum.TECHNICAL, PracticeKindEnum.HR: HistoryTypeEnum.HR}


class PracticeAI(Protocol):
    async def first_question(self, kind: PracticeKindEnum, config: InterviewConfig | None) -> LLMResult[str]: ...

    async def follow_up_question(
        self, kind: PracticeKindEnum, conversation: list[tuple[str, str]], config: InterviewConfig | None
    ) -> LLMResult[str]: ...

    async def answer_feedback(
        self, kind: PracticeKindEnum, conversation: list[tuple[str, str]], config: InterviewConfig | None
    ) -> list[str]: ...

    async def session_report(
        self,
        kind: PracticeKindEnum,
        conversation: list[tuple[str, str]],
        feedbacks: list[str],
        config: InterviewConfig | None,
    ) -> SessionReportLLM: ...

    async def discussion_topics(self) -> LLMResult[list[DiscussionTopic]]: ...

    async def discussion_opening(self, topic: str) -> LLMResult[str]: ...

    async def discussion_turn(
        self, topic: str, chat_log: list[GDChatMessage], participants: tuple[str, str]
    ) -> LLMResult[list[GDChatMessage]]: ...

    async def profile_review(self, request: ProfileReviewRequest) -> ProfileReviewLLM: ...


def _static_questions(kind: PracticeKindEnum) -> list[str]:
    if kind is PracticeKindEnum.TECHNICAL:
        return get_static_technical_questions(8)
    return get_static_hr_questions(8)


class ConversationPracticeSession:
    def __init__(
        self,
        kind: PracticeKindEnum,
        first_question: str,
        config: InterviewConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.kind = kind
        self.config = config
        self.current_question = first_question
        self.turns: list[tuple[str, str]] = []
        self._clock = clock
        self._started_at = clock()

    @property
    def elapsed(self) -> float:
        return max(0.0, self._clock() - self._started_at)

    def asked(self) -> set[str]:
        return {q for q, _ in self.turns} | {self.current_question}

    def record(self, answer: str, next_question: str) -> None:
        self.turns.append((self.current_question, answer))
        self.current_question = next_question

    def state_out(self) -> PracticeStateOut:
        return PracticeStateOut(
            session_id=self.session_id,
            kind=self.kind,
            current_question=self.current_question,
            turns=[ConversationTurn(question=q, answer=a) for q, a in self.turns],
            config=self.config,
        )


class GroupDiscussionSession:
    def __init__(
        self,
        topic: str,
        participants: tuple[str, str],
        duration_minutes: int,
        opening: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.topic = topic
        self.participants = participants
        self.duration_seconds = float(duration_minutes * 60)
        self.chat_log: list[GDChatMessage] = [GDChatMessage(participant=MODERATOR, message=opening)]
        self._clock = clock
        self._started_at = clock()

    @property
    def elapsed(self) -> float:
        return min(self.duration_seconds, max(0.0, self._clock() - self._started_at))

    @property
    def time_left(self) -> float:
        return max(0.0, self.duration_seconds - (self._clock() - self._started_at))

    @property
    def time_up(self) -> bool:
        return self.time_left <= 0

    @property
    def user_turns(self) -> int:
        return sum(1 for m in self.chat_log if m.participant == USER_PARTICIPANT)

    def add(self, participant: str, message: str) -> None:
        self.chat_log.append(GDChatMessage(participant=participant, message=message))

    def state_out(self) -> DiscussionStateOut:
        return DiscussionStateOut(
            session_id=self.session_id,
            topic=self.topic,
            participants=list(self.participants),
            chat_log=list(self.chat_log),
            user_turns=self.user_turns,
            time_left_seconds=round(self.time_left, 1),
            time_up=self.time_up,
        )


class PracticeService:
    def __init__(
        self,
        progress: ProgressService,
        registry: LiveSessionRegistry,
        ai: PracticeAI,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._progress = progress
        self._registry = registry
        self._ai = ai
        self._clock = clock

    async def _save(self, user_id: str, entry: HistoryCreate) -> tuple[int | None, str | None]:
        """Write ``entry``; returns ``(history_id, save_error)``."""
        try:
            record = await self._progress.record_session(user_id, entry)
        except SQLAlchemyError as e:
            logger.exception("Failed to save %s session for user %s", entry.type.value, user_id)
            await self._progress.rollback()
            return None, str(e)
        return record.id, None

    # Technical and HR practice

    async def start_conversation(
        self, user_id: str, kind: PracticeKindEnum, config: InterviewConfig | None = None
    ) -> PracticeStateOut:
        if kind is PracticeKindEnum.TECHNICAL:
            config = config or InterviewConfig()
        else:
            config = None
        try:
            result = await self._ai.first_question(kind, config)
        except AIServiceError:
            result = None
        if result is not None and result.ok:
            first = result.value
        else:
            logger.warning("Falling back to a static %s opening question", kind.value)
            first = _static_questions(kind)[0]

        self._registry.cleanup_idle(settings.LIVE_SESSION_TTL_SECONDS)
        session = ConversationPracticeSession(kind, first, config, clock=self._clock)  # type: ignore[arg-type]
        self._registry.put(_REGISTRY_KIND[kind], user_id, session)
        logger.info("User %s started %s practice %s", user_id, kind.value, session.session_id)
        return session.state_out()

    def _live_conversation(self, user_id: str, kind: PracticeKindEnum) -> ConversationPracticeSession:
        session = self._registry.get(_REGISTRY_KIND[kind], user_id)
        if session is None:
            raise QuizStateError(f"No {kind.value} practice session in progress")
        return session

    def get_conversation(self, user_id: str, kind: PracticeKindEnum) -> PracticeStateOut:
        return self._live_conversation(user_id, kind).state_out()

    async def answer(self, user_id: str, kind: PracticeKindEnum, answer: str) -> PracticeStateOut:
        """Record ``answer`` and ask a follow-up; a service outage leaves the session unchanged."""
        session = self._live_conversation(user_id, kind)
        if not answer.strip():
            raise QuizStateError("Please provide an answer.")
        conversation = [*session.turns, (session.current_question, answer)]
        result = await self._ai.follow_up_question(kind, conversation, session.config)
        if result.ok:
            next_question = result.value
        else:
            logger.warning("Unusable follow-up for %s practice %s: %s", kind.value, session.session_id, result.error)
            asked = session.asked()
            unused = [q for q in _static_questions(kind) if q not in asked]
            next_question = unused[0] if unused else SWITCH_GEARS_QUESTION[kind]
        session.record(answer, next_question)  # type: ignore[arg-type]
        return session.state_out()

    async def end_conversation(
        self, user_id: str, kind: PracticeKindEnum, final_answer: str | None = None
    ) -> PracticeReport | None:
        """Review the session and write it to history.

        Returns None when nothing was answered. A feedback outage propagates and
        keeps the session live so the user can retry.
        """
        session = self._live_conversation(user_id, kind)
        conversation = list(session.turns)
        if final_answer and final_answer.strip():
            conversation.append((session.current_question, final_answer))
        if not conversation:
            self._registry.pop(_REGISTRY_KIND[kind], user_id)
            logger.info("%s practice %s ended without answers; nothing saved", kind.value, session.session_id)
            return None

        feedbacks = await self._ai.answer_feedback(kind, conversation, session.config)
        report = await self._ai.session_report(kind, conversation, feedbacks, session.config)
        self._registry.pop(_REGISTRY_KIND[kind], user_id)

        result = PracticeReport(
            session_id=session.session_id,
            kind=kind,
            rating=report.rating,
            summary=report.summary,
            report=report.report,
            feedback=[
                QAItem(question=q, answer=a, feedback_summary=f or MISSING_FEEDBACK)
                for (q, a), f in zip(conversation, feedbacks)
            ],
            duration_seconds=round(session.elapsed, 1),
        )
        history_id, save_error = await self._save(user_id, self._conversation_entry(session, result))
        return result.model_copy(update={"history_id": history_id, "saved": save_error is None, "save_error": save_error})

    def _conversation_entry(self, session: ConversationPracticeSession, report: PracticeReport) -> HistoryCreate:
        data_reference = {
            "questions_answered": len(report.feedback),
            "q_and_a_list": [item.model_dump() for item in report.feedback],
            "full_report": report.report,
        }
        if session.config is not None:
            data_reference.update(
                role=session.config.role,
                experience=session.config.experience,
                tech_stack=session.config.tech_stack,
                job_description=session.config.job_description,
            )
        return HistoryCreate(
            type=_HISTORY_TYPE[session.kind],
            session_id=session.session_id,
            duration_seconds=report.duration_seconds,
            score_rating=report.rating,
            summary=report.summary,
            data_reference=data_reference,
        )

    def abandon_conversation(self, user_id: str, kind: PracticeKindEnum) -> None:
        if self._registry.pop(_REGISTRY_KIND[kind], user_id) is None:
            raise QuizStateError(f"No {kind.value} practice session in progress")

    # Group discussion

    async def discussion_topics(self) -> list[DiscussionTopic]:
        try:
            result = await self._ai.discussion_topics()
        except AIServiceError:
            return list(FALLBACK_DISCUSSION_TOPICS)
        return result.value_or(list(FALLBACK_DISCUSSION_TOPICS))

    async def start_discussion(self, user_id: str, request: DiscussionStartRequest) -> DiscussionStateOut:
        default_opening = f"Welcome, everyone. Today's topic is \"{request.topic}\". Who would like to begin?"
        try:
            opening = (await self._ai.discussion_opening(request.topic)).value_or(default_opening)
        except AIServiceError:
            opening = default_opening
        participants = tuple(name.strip() for name in request.participants)
        session = GroupDiscussionSession(
            request.topic, participants, request.duration_minutes, opening, clock=self._clock  # type: ignore[arg-type]
        )
        self._registry.cleanup_idle(settings.LIVE_SESSION_TTL_SECONDS)
        self._registry.put(GROUP_DISCUSSION, user_id, session)
        logger.info("User %s started group discussion %s on %r", user_id, session.session_id, request.topic)
        return session.state_out()

    def _live_discussion(self, user_id: str) -> GroupDiscussionSession:
        session = self._registry.get(GROUP_DISCUSSION, user_id)
        if session is None:
            raise QuizStateError("No group discussion in progress")
        return session

    def get_discussion(self, user_id: str) -> DiscussionStateOut:
        return self._live_discussion(user_id).state_out()

    async def say(self, user_id: str, message: str) -> DiscussionStateOut:
        session = self._live_discussion(user_id)
        if session.time_up:
            raise QuizStateError("Time is up for this discussion.")
        if not message.strip():
            raise QuizStateError("Please enter a message.")
        session.add(USER_PARTICIPANT, message.strip())
        try:
            result = await self._ai.discussion_turn(session.topic, list(session.chat_log), session.participants)
        except AIServiceError:
            session.add(SYSTEM_PARTICIPANT, CONNECTION_TROUBLE)
            return session.state_out()
        if result.ok:
            session.chat_log.extend(result.value)  # type: ignore[arg-type]
        else:
            session.add(session.participants[0], LOST_TRAIN_OF_THOUGHT)
        return session.state_out()

    async def end_discussion(self, user_id: str) -> DiscussionEndResponse:
        """Close the discussion; it is written to history only if the user spoke."""
        session = self._registry.pop(GROUP_DISCUSSION, user_id)
        if session is None:
            raise QuizStateError("No group discussion in progress")
        duration = round(session.elapsed, 1)
        if session.user_turns == 0:
            logger.info("Group discussion %s ended without user turns; nothing saved", session.session_id)
            return DiscussionEndResponse(saved=False, user_turns=0, duration_seconds=duration)

        entry = HistoryCreate(
            type=HistoryTypeEnum.GROUP_DISCUSSION,
            session_id=session.session_id,
            duration_seconds=duration,
            summary=f'Participated in a group discussion on "{session.topic}".',
            data_reference={
                "topic": session.topic,
                "user_turns": session.user_turns,
                "chat_log": [m.model_dump() for m in session.chat_log],
            },
        )
        history_id, save_error = await self._save(user_id, entry)
        return DiscussionEndResponse(
            saved=save_error is None,
            user_turns=session.user_turns,
            duration_seconds=duration,
            history_id=history_id,
            save_error=save_error,
        )

    def abandon_discussion(self, user_id: str) -> None:
        if self._registry.pop(GROUP_DISCUSSION, user_id) is None:
            raise QuizStateError("No group discussion in progress")

    # Profile review

    async def review_profile(self, user_id: str, request: ProfileReviewRequest) -> ProfileReviewOut:
        """Review a resume and record it; a service outage propagates and nothing is saved."""
        review = await self._ai.profile_review(request)
        entry = HistoryCreate(
            type=HistoryTypeEnum.PROFILE_REVIEW,
            session_id=uuid.uuid4().hex,
            score_rating=review.rating,
            summary=review.summary,
            data_reference={
                "target_company_tier": request.target_company_tier or "Not specified",
                "key_recommendations": review.key_recommendations,
                "full_report": review.feedback,
            },
        )
        history_id, save_error = await self._save(user_id, entry)
        return ProfileReviewOut(
            rating=review.rating,
            summary=review.summary,
            key_recommendations=review.key_recommendations,
            feedback=review.feedback,
            history_id=history_id,
            saved=save_error is None,
        )
