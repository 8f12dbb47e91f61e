import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_practice_service
from src.models.schemas.practice import (
    DiscussionEndResponse,
    DiscussionMessageRequest,
    DiscussionStartRequest,
    DiscussionStateOut,
    DiscussionTopicsResponse,
    InterviewConfig,
    PracticeAnswerRequest,
    PracticeEndRequest,
    PracticeEndResponse,
    PracticeKindEnum,
    PracticeStateOut,
    ProfileReviewOut,
    ProfileReviewRequest,
)
from src.services.practice import PracticeService
from src.utilities.exceptions.domain import AIServiceError, QuizStateError


practice_router = fastapi.APIRouter(prefix="/practice", tags=["practice"])
discussion_router = fastapi.APIRouter(prefix="/group-discussion", tags=["group-discussion"])
profile_review_router = fastapi.APIRouter(prefix="/profile-review", tags=["profile-review"])


@practice_router.post(
    path="/{kind}/start",
    name="practice:start",
    response_model=PracticeStateOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Start a technical or HR practice interview (replaces any running one of the same kind)",
)
async def start_practice(
    kind: PracticeKindEnum,
    payload: InterviewConfig | None = fastapi.Body(default=None),
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> PracticeStateOut:
    return await practice.start_conversation(user_id, kind, payload)


@practice_router.get(
    path="/{kind}",
    name="practice:state",
    response_model=PracticeStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_practice(
    kind: PracticeKindEnum,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> PracticeStateOut:
    try:
        return practice.get_conversation(user_id, kind)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))


@practice_router.post(
    path="/{kind}/answer",
    name="practice:answer",
    response_model=PracticeStateOut,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Answer the current question and get a follow-up",
)
async def answer_practice(
    kind: PracticeKindEnum,
    payload: PracticeAnswerRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> PracticeStateOut:
    try:
        return await practice.answer(user_id, kind, payload.answer)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))
    except AIServiceError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_502_BAD_GATEWAY, detail=str(e))


@practice_router.post(
    path="/{kind}/end",
    name="practice:end",
    response_model=PracticeEndResponse,
    status_code=fastapi.status.HTTP_200_OK,
    summary="End the session, get feedback and a report, and save it to history",
)
async def end_practice(
    kind: PracticeKindEnum,
    payload: PracticeEndRequest | None = fastapi.Body(default=None),
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> PracticeEndResponse:
    try:
        report = await practice.end_conversation(user_id, kind, payload.answer if payload else None)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))
    except AIServiceError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return PracticeEndResponse(report=report)


@practice_router.delete(
    path="/{kind}",
    name="practice:abandon",
    status_code=fastapi.status.HTTP_204_NO_CONTENT,
    summary="Drop the session without feedback or history",
)
async def abandon_practice(
    kind: PracticeKindEnum,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> fastapi.Response:
    try:
        practice.abandon_conversation(user_id, kind)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))
    return fastapi.Response(status_code=fastapi.status.HTTP_204_NO_CONTENT)


@discussion_router.get(
    path="/topics",
    name="group-discussion:topics",
    response_model=DiscussionTopicsResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def list_discussion_topics(
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> DiscussionTopicsResponse:
    return DiscussionTopicsResponse(topics=await practice.discussion_topics())


@discussion_router.post(
    path="/start",
    name="group-discussion:start",
    response_model=DiscussionStateOut,
    status_code=fastapi.status.HTTP_201_CREATED,
)
async def start_discussion(
    payload: DiscussionStartRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> DiscussionStateOut:
    return await practice.start_discussion(user_id, payload)


@discussion_router.get(
    path="",
    name="group-discussion:state",
    response_model=DiscussionStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_discussion(
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> DiscussionStateOut:
    try:
        return practice.get_discussion(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))


@discussion_router.post(
    path="/messages",
    name="group-discussion:say",
    response_model=DiscussionStateOut,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Post a message; the AI participants reply in the returned chat log",
)
async def post_discussion_message(
    payload: DiscussionMessageRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> DiscussionStateOut:
    try:
        return await practice.say(user_id, payload.message)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))


@discussion_router.post(
    path="/end",
    name="group-discussion:end",
    response_model=DiscussionEndResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def end_discussion(
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> DiscussionEndResponse:
    try:
        return await practice.end_discussion(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))


@discussion_router.delete(
    path="",
    name="group-discussion:abandon",
    status_code=fastapi.status.HTTP_204_NO_CONTENT,
)
async def abandon_discussion(
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> fastapi.Response:
    try:
        practice.abandon_discussion(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))
    return fastapi.Response(status_code=fastapi.status.HTTP_204_NO_CONTENT)


@profile_review_router.post(
    path="",
    name="profile-review:create",
    response_model=ProfileReviewOut,
    status_code=fastapi.status.HTTP_201_CREATED,
)
async def create_profile_review(
    payload: ProfileReviewRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    practice: PracticeService = fastapi.Depends(get_practice_service),
) -> ProfileReviewOut:
    try:
        return await practice.review_profile(user_id, payload)
    except AIServiceError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_502_BAD_GATEWAY, detail=str(e))
