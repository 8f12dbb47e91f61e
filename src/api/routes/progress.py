import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_goal_tracker, get_progress_service, get_revision_service
from src.models.schemas.progress import (
    ActiveGoalResponse,
    BadgeBoardResponse,
    DashboardResponse,
    EarnedBadgesResponse,
    GoalCreate,
    GoalFromTextRequest,
    GoalOut,
    UserProfileOut,
)
from src.services.goals import GoalTracker
from src.services.progress import ProgressService
from src.services.revision import RevisionService
from src.utilities.exceptions.domain import AIServiceError, InvalidGoalError


router = fastapi.APIRouter(prefix="/progress", tags=["progress"])


@router.get(
    path="/profile",
    name="progress:profile",
    response_model=UserProfileOut,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Current practice streak",
)
async def get_profile(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> UserProfileOut:
    profile = await progress.get_profile(user_id)
    return UserProfileOut.model_validate(profile)


@router.get(
    path="/badges",
    name="progress:badges",
    response_model=EarnedBadgesResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def list_badges(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> EarnedBadgesResponse:
    return EarnedBadgesResponse(items=await progress.list_badges(user_id))


@router.get(
    path="/badges/board",
    name="progress:badge-board",
    response_model=BadgeBoardResponse,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Full badge catalog grouped Gold, Silver, Bronze with the user's earned state",
)
async def badge_board(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> BadgeBoardResponse:
    return await progress.badge_board(user_id)


@router.post(
    path="/goals",
    name="progress:set-goal",
    response_model=GoalOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Set the active improvement goal, replacing any previous one",
)
async def set_goal(
    payload: GoalCreate,
    user_id: str = fastapi.Depends(get_current_user_id),
    goals: GoalTracker = fastapi.Depends(get_goal_tracker),
) -> GoalOut:
    try:
        goal = await goals.set_goal(user_id, payload.topic, payload.target_accuracy, payload.deadline)
    except InvalidGoalError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return GoalOut.model_validate(goal)


@router.post(
    path="/goals/from-text",
    name="progress:set-goal-from-text",
    response_model=GoalOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Set the active goal from a free-text description",
)
async def set_goal_from_text(
    payload: GoalFromTextRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    goals: GoalTracker = fastapi.Depends(get_goal_tracker),
) -> GoalOut:
    try:
        goal = await goals.set_goal_from_text(user_id, payload.goal_text)
    except InvalidGoalError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except AIServiceError:
        raise fastapi.HTTPException(
            status_code=fastapi.status.HTTP_502_BAD_GATEWAY,
            detail="Could not set your goal. The AI service might be busy. Please try again.",
        )
    return GoalOut.model_validate(goal)


@router.get(
    path="/goals/active",
    name="progress:active-goal",
    response_model=ActiveGoalResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_active_goal(
    user_id: str = fastapi.Depends(get_current_user_id),
    goals: GoalTracker = fastapi.Depends(get_goal_tracker),
) -> ActiveGoalResponse:
    goal = await goals.get_active_goal(user_id)
    return ActiveGoalResponse(goal=GoalOut.model_validate(goal) if goal is not None else None)


@router.get(
    path="/dashboard",
    name="progress:dashboard",
    response_model=DashboardResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def dashboard(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
    goals: GoalTracker = fastapi.Depends(get_goal_tracker),
    revisions: RevisionService = fastapi.Depends(get_revision_service),
) -> DashboardResponse:
    profile = await progress.get_profile(user_id)
    goal = await goals.get_active_goal(user_id)
    return DashboardResponse(
        streak=profile.streak,
        last_activity_date=profile.last_activity_date,
        active_goal=GoalOut.model_validate(goal) if goal is not None else None,
        earned_badges=await progress.list_badges(user_id),
        revision_count=len(await revisions.list(user_id)),
        sessions_completed=await progress.count_sessions(user_id),
    )
