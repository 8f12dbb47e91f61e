import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_mock_interview_service
from src.models.schemas.mock_interview import MockAnswerRequest, MockInterviewStartRequest, MockInterviewStateOut
from src.services.mock_interview import MockInterviewService
from src.utilities.exceptions.domain import QuizStateError, RoundTransitionError


router = fastapi.APIRouter(prefix="/mock-interview", tags=["mock-interview"])


@router.post(
    path="/start",
    name="mock-interview:start",
    response_model=MockInterviewStateOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Start a timed Aptitude -> Technical -> HR mock interview",
)
async def start_mock_interview(
    payload: MockInterviewStartRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    interviews: MockInterviewService = fastapi.Depends(get_mock_interview_service),
) -> MockInterviewStateOut:
    return await interviews.start(user_id, payload.role, payload.company_tier.value, payload.duration_minutes)


@router.get(
    path="",
    name="mock-interview:state",
    response_model=MockInterviewStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_mock_interview(
    user_id: str = fastapi.Depends(get_current_user_id),
    interviews: MockInterviewService = fastapi.Depends(get_mock_interview_service),
) -> MockInterviewStateOut:
    try:
        return await interviews.get_state(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    path="/answer",
    name="mock-interview:answer",
    response_model=MockInterviewStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def answer_mock_question(
    payload: MockAnswerRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    interviews: MockInterviewService = fastapi.Depends(get_mock_interview_service),
) -> MockInterviewStateOut:
    try:
        return await interviews.answer(user_id, payload.answer)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    path="/proceed",
    name="mock-interview:proceed",
    response_model=MockInterviewStateOut,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Next question, or finish the current round and open the next one",
)
async def proceed_mock_interview(
    user_id: str = fastapi.Depends(get_current_user_id),
    interviews: MockInterviewService = fastapi.Depends(get_mock_interview_service),
) -> MockInterviewStateOut:
    try:
        return await interviews.proceed(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))
    except RoundTransitionError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.delete(
    path="",
    name="mock-interview:stop",
    status_code=fastapi.status.HTTP_204_NO_CONTENT,
    summary="Stop the interview without a report",
)
async def stop_mock_interview(
    user_id: str = fastapi.Depends(get_current_user_id),
    interviews: MockInterviewService = fastapi.Depends(get_mock_interview_service),
) -> fastapi.Response:
    try:
        await interviews.stop(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))
    return fastapi.Response(status_code=fastapi.status.HTTP_204_NO_CONTENT)
