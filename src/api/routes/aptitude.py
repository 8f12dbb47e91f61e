import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_aptitude_quiz_service, get_progress_service
from src.models.schemas.aptitude import (
    APTITUDE_SUB_TOPICS,
    AnswerRequest,
    DiagnosticStatusResponse,
    ImprovementSuggestionsResponse,
    PracticeQuizRequest,
    QuizAnalysis,
    QuizResultOut,
    QuizStateOut,
    QuizStepResponse,
    SavedQuizState,
    SavedQuizSummary,
    TopicCatalogItem,
    TopicCatalogResponse,
)
from src.services.aptitude import AptitudeQuizService
from src.services.progress import ProgressService
from src.utilities.exceptions.domain import InvalidQuizSelectionError, QuizStateError


router = fastapi.APIRouter(prefix="/aptitude", tags=["aptitude"])


def _conflict(e: QuizStateError) -> fastapi.HTTPException:
    return fastapi.HTTPException(status_code=fastapi.status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    path="/topics",
    name="aptitude:topics",
    response_model=TopicCatalogResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def list_topics(user_id: str = fastapi.Depends(get_current_user_id)) -> TopicCatalogResponse:
    return TopicCatalogResponse(
        topics=[TopicCatalogItem(topic=topic, sub_topics=subs) for topic, subs in APTITUDE_SUB_TOPICS.items()]
    )


@router.post(
    path="/practice/start",
    name="aptitude:start-practice",
    response_model=QuizStateOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Start a practice quiz; discards any saved quiz",
)
async def start_practice(
    payload: PracticeQuizRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStateOut:
    try:
        return await quizzes.start_practice(user_id, payload.sub_topics, payload.num_questions, payload.difficulty)
    except InvalidQuizSelectionError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post(
    path="/diagnostic/start",
    name="aptitude:start-diagnostic",
    response_model=QuizStateOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Start the 30-question, 40-minute diagnostic test",
)
async def start_diagnostic(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStateOut:
    return await quizzes.start_diagnostic(user_id)


@router.get(
    path="/diagnostic/status",
    name="aptitude:diagnostic-status",
    response_model=DiagnosticStatusResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def diagnostic_status(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> DiagnosticStatusResponse:
    return DiagnosticStatusResponse(
        has_completed_diagnostic=await progress.has_completed_diagnostic(user_id),
        saved_quiz=await quizzes.saved_summary(user_id),
    )


@router.get(
    path="/quiz",
    name="aptitude:state",
    response_model=QuizStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_state(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStateOut:
    try:
        return quizzes.get_state(user_id)
    except QuizStateError as e:
        raise _conflict(e)


@router.post(
    path="/quiz/answer",
    name="aptitude:answer",
    response_model=QuizStepResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def answer(
    payload: AnswerRequest,
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStepResponse:
    try:
        return await quizzes.answer(user_id, payload.answer)
    except QuizStateError as e:
        raise _conflict(e)


@router.post(
    path="/quiz/next",
    name="aptitude:next",
    response_model=QuizStepResponse,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Next question; on the last question the quiz is submitted",
)
async def next_question(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStepResponse:
    try:
        return await quizzes.next(user_id)
    except QuizStateError as e:
        raise _conflict(e)


@router.post(
    path="/quiz/previous",
    name="aptitude:previous",
    response_model=QuizStepResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def previous_question(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStepResponse:
    try:
        return await quizzes.previous(user_id)
    except QuizStateError as e:
        raise _conflict(e)


@router.post(
    path="/quiz/submit",
    name="aptitude:submit",
    response_model=QuizResultOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def submit(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizResultOut:
    try:
        return await quizzes.submit(user_id)
    except QuizStateError as e:
        raise _conflict(e)


@router.post(
    path="/quiz/suspend",
    name="aptitude:suspend",
    response_model=SavedQuizState,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Save the running quiz so it can be resumed later",
)
async def suspend(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> SavedQuizState:
    try:
        return await quizzes.suspend(user_id)
    except QuizStateError as e:
        raise _conflict(e)


@router.get(
    path="/quiz/saved",
    name="aptitude:saved",
    response_model=SavedQuizSummary,
    status_code=fastapi.status.HTTP_200_OK,
)
async def saved_quiz(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> SavedQuizSummary:
    return await quizzes.saved_summary(user_id)


@router.post(
    path="/quiz/resume",
    name="aptitude:resume",
    response_model=QuizStateOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def resume(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> QuizStateOut:
    try:
        return await quizzes.resume(user_id)
    except QuizStateError as e:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    path="/quiz",
    name="aptitude:discard",
    status_code=fastapi.status.HTTP_204_NO_CONTENT,
    summary="Abandon the running quiz and clear the saved one",
)
async def discard(
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> fastapi.Response:
    await quizzes.abandon(user_id)
    return fastapi.Response(status_code=fastapi.status.HTTP_204_NO_CONTENT)


@router.post(
    path="/suggestions",
    name="aptitude:suggestions",
    response_model=ImprovementSuggestionsResponse,
    status_code=fastapi.status.HTTP_200_OK,
    summary="AI study suggestions from a quiz's speed/accuracy analysis",
)
async def suggestions(
    payload: QuizAnalysis,
    user_id: str = fastapi.Depends(get_current_user_id),
    quizzes: AptitudeQuizService = fastapi.Depends(get_aptitude_quiz_service),
) -> ImprovementSuggestionsResponse:
    return ImprovementSuggestionsResponse(suggestions=await quizzes.improvement_suggestions(payload))
