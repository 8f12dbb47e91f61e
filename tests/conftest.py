import os

# Settings are read at import time; keep tests off real services
os.environ.setdefault("ENVIRONMENT", "DEV")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import asyncio  # noqa: E402
import datetime  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.models.db import badge, interview_history, quiz_snapshot, revision_question, user_goal, user_profile  # noqa: E402,F401
from src.repository.crud.badge import EarnedBadgeCRUDRepository  # noqa: E402
from src.repository.crud.goal import UserGoalCRUDRepository  # noqa: E402
from src.repository.crud.history import InterviewHistoryCRUDRepository  # noqa: E402
from src.repository.crud.profile import UserProfileCRUDRepository  # noqa: E402
from src.repository.crud.quiz_snapshot import QuizSnapshotCRUDRepository  # noqa: E402
from src.repository.crud.revision import RevisionQuestionCRUDRepository  # noqa: E402
from src.models.schemas.aptitude import AptitudeQuestion  # noqa: E402
from src.repository.table import Base  # noqa: E402
from src.models.schemas.history import GDChatMessage  # noqa: E402
from src.services.llm import LLMResult, OverallReportLLM, ProfileReviewLLM, SessionReportLLM  # noqa: E402
from src.services.progress import ProgressService  # noqa: E402


class FrozenClock:
    """Settable UTC clock for services that take a ``clock`` callable."""

    def __init__(self, now: datetime.datetime) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + datetime.timedelta(**kwargs)


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest.fixture
def repos(db_session):
    return SimpleNamespace(
        history=InterviewHistoryCRUDRepository(async_session=db_session),
        profile=UserProfileCRUDRepository(async_session=db_session),
        badge=EarnedBadgeCRUDRepository(async_session=db_session),
        goal=UserGoalCRUDRepository(async_session=db_session),
        revision=RevisionQuestionCRUDRepository(async_session=db_session),
        snapshot=QuizSnapshotCRUDRepository(async_session=db_session),
    )


@pytest.fixture
def clock():
    # A Wednesday
    return FrozenClock(datetime.datetime(2025, 3, 5, 10, 0, tzinfo=datetime.timezone.utc))


@pytest.fixture
def progress(repos, clock):
    return ProgressService(repos.history, repos.profile, repos.badge, repos.revision, clock=clock)


class FakeInterviewAI:
    """Deterministic stand-in for ``OpenAIInterviewAI``.

    ``question_limit`` caps every generated round; ``technical_gate`` holds the
    technical question fetch until the event is set.
    """

    def __init__(self, question_limit: int | None = None) -> None:
        self.question_limit = question_limit
        self.technical_gate: asyncio.Event | None = None
        self.feedback_error: Exception | None = None
        self.question_error: Exception | None = None
        self.report_calls = 0

    def _count(self, count):
        return min(count, self.question_limit) if self.question_limit else count

    async def aptitude_questions(self, count):
        return LLMResult(
            value=[
                AptitudeQuestion(question=f"A{i}", options=["a", "b", "c", "d"], correct_answer="a", sub_topic="Percentage")
                for i in range(self._count(count))
            ]
        )

    async def technical_questions(self, role, company_tier, count):
        if self.technical_gate is not None:
            await self.technical_gate.wait()
        if self.question_error:
            raise self.question_error
        return LLMResult(value=[f"T{i}" for i in range(self._count(count))])

    async def hr_questions(self, count):
        return LLMResult(value=[f"H{i}" for i in range(self._count(count))])

    async def technical_feedback(self, conversation, role):
        if self.feedback_error:
            raise self.feedback_error
        return [f"tech feedback {i}" for i in range(len(conversation))]

    async def hr_feedback(self, conversation):
        return ["x" * 200 for _ in conversation]

    async def overall_report(self, results, role, company_tier):
        self.report_calls += 1
        return OverallReportLLM(recommendation="Hire", summary="Solid overall.", report="# Report")


class HistoryRecorder:
    """Collects mock-interview history entries instead of writing them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.entries = []
        self.error = error

    async def __call__(self, user_id, entry):
        if self.error:
            raise self.error
        self.entries.append((user_id, entry))


@pytest.fixture
def ai():
    return FakeInterviewAI()


@pytest.fixture
def recorder():
    return HistoryRecorder()


class FakePracticeAI:
    """Deterministic stand-in for ``OpenAIPracticeAI``.

    Set ``follow_up`` to an ``LLMResult`` to override the next follow-up, or an
    ``*_error`` attribute to make that call raise.
    """

    def __init__(self) -> None:
        self.follow_up: LLMResult | None = None
        self.follow_up_error: Exception | None = None
        self.feedback_error: Exception | None = None
        self.opening_error: Exception | None = None
        self.turn_result: LLMResult | None = None
        self.turn_error: Exception | None = None
        self.review_error: Exception | None = None
        self.feedback_calls = 0

    async def first_question(self, kind, config):
        return LLMResult(value=f"{kind.value} opener")

    async def follow_up_question(self, kind, conversation, config):
        if self.follow_up_error:
            raise self.follow_up_error
        if self.follow_up is not None:
            return self.follow_up
        return LLMResult(value=f"{kind.value} follow-up {len(conversation)}")

    async def answer_feedback(self, kind, conversation, config):
        self.feedback_calls += 1
        if self.feedback_error:
            raise self.feedback_error
        return [f"feedback on {a}" for _, a in conversation]

    async def session_report(self, kind, conversation, feedbacks, config):
        return SessionReportLLM(rating="Strong", summary="Clear answers.", report="# Report")

    async def discussion_topics(self):
        return LLMResult(value=None, error="unusable")

    async def discussion_opening(self, topic):
        if self.opening_error:
            raise self.opening_error
        return LLMResult(value=f"Let us discuss {topic}.")

    async def discussion_turn(self, topic, chat_log, participants):
        if self.turn_error:
            raise self.turn_error
        if self.turn_result is not None:
            return self.turn_result
        return LLMResult(value=[GDChatMessage(participant=participants[1], message="Counterpoint.")])

    async def profile_review(self, request):
        if self.review_error:
            raise self.review_error
        return ProfileReviewLLM(
            rating="Good",
            summary="Solid projects.",
            key_recommendations=["Quantify impact", "Add tests", "Trim summary"],
            feedback="# Review",
        )


@pytest.fixture
def practice_ai():
    return FakePracticeAI()
