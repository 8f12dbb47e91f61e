"""Service builders wired onto the request-scoped database session."""

import fastapi

from src.api.dependencies.repository import get_repository
from src.models.schemas.history import HistoryCreate
from src.repository.crud.badge import EarnedBadgeCRUDRepository
from src.repository.crud.goal import UserGoalCRUDRepository
from src.repository.crud.history import InterviewHistoryCRUDRepository
from src.repository.crud.profile import UserProfileCRUDRepository
from src.repository.crud.quiz_snapshot import QuizSnapshotCRUDRepository
from src.repository.crud.revision import RevisionQuestionCRUDRepository
from src.repository.database import async_db
from src.services.aptitude import AptitudeQuizService
from src.services.goals import GoalTracker
from src.services.llm import OpenAIInterviewAI, OpenAIPracticeAI
from src.services.mock_interview import InterviewAI, MockInterviewService
from src.services.practice import PracticeAI, PracticeService
from src.services.progress import ProgressService
from src.services.quiz_cache import QuizResumeCache, SQLSnapshotStorage
from src.services.registry import live_sessions
from src.services.revision import RevisionService


def get_progress_service(
    history_repo: InterviewHistoryCRUDRepository = fastapi.Depends(get_repository(repo_type=InterviewHistoryCRUDRepository)),
    profile_repo: UserProfileCRUDRepository = fastapi.Depends(get_repository(repo_type=UserProfileCRUDRepository)),
    badge_repo: EarnedBadgeCRUDRepository = fastapi.Depends(get_repository(repo_type=EarnedBadgeCRUDRepository)),
    revision_repo: RevisionQuestionCRUDRepository = fastapi.Depends(get_repository(repo_type=RevisionQuestionCRUDRepository)),
) -> ProgressService:
    return ProgressService(history_repo, profile_repo, badge_repo, revision_repo)


def get_goal_tracker(
    goal_repo: UserGoalCRUDRepository = fastapi.Depends(get_repository(repo_type=UserGoalCRUDRepository)),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> GoalTracker:
    return GoalTracker(goal_repo, progress)


def get_revision_service(
    revision_repo: RevisionQuestionCRUDRepository = fastapi.Depends(get_repository(repo_type=RevisionQuestionCRUDRepository)),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> RevisionService:
    return RevisionService(revision_repo, progress)


def get_aptitude_quiz_service(
    snapshot_repo: QuizSnapshotCRUDRepository = fastapi.Depends(get_repository(repo_type=QuizSnapshotCRUDRepository)),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> AptitudeQuizService:
    return AptitudeQuizService(progress, QuizResumeCache(SQLSnapshotStorage(snapshot_repo)), live_sessions)


def get_interview_ai() -> InterviewAI:
    return OpenAIInterviewAI()


async def record_history_in_new_session(user_id: str, entry: HistoryCreate) -> None:
    """Write a finished mock interview from outside a request (e.g. when its timer fires)."""
    session = async_db.get_session()
    try:
        progress = ProgressService(
            InterviewHistoryCRUDRepository(async_session=session),
            UserProfileCRUDRepository(async_session=session),
            EarnedBadgeCRUDRepository(async_session=session),
            RevisionQuestionCRUDRepository(async_session=session),
        )
        await progress.record_session(user_id, entry)
    finally:
        await session.close()


def get_mock_interview_service(ai: InterviewAI = fastapi.Depends(get_interview_ai)) -> MockInterviewService:
    return MockInterviewService(live_sessions, ai, record_history_in_new_session)


def get_practice_ai() -> PracticeAI:
    return OpenAIPracticeAI()


def get_practice_service(
    progress: ProgressService = fastapi.Depends(get_progress_service),
    ai: PracticeAI = fastapi.Depends(get_practice_ai),
) -> PracticeService:
    return PracticeService(progress, live_sessions, ai)
