import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_revision_service
from src.models.schemas.revision import RevisionQuestionCreate, RevisionQuestionOut, RevisionQuestionsListResponse
from src.services.revision import RevisionService
from src.utilities.exceptions.database import EntityDoesNotExist


router = fastapi.APIRouter(prefix="/review-hub", tags=["review-hub"])


@router.post(
    path="/questions",
    name="review-hub:tag",
    response_model=RevisionQuestionOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Tag an aptitude question for revision",
)
async def tag_question(
    payload: RevisionQuestionCreate,
    user_id: str = fastapi.Depends(get_current_user_id),
    revisions: RevisionService = fastapi.Depends(get_revision_service),
) -> RevisionQuestionOut:
    entry = await revisions.tag(user_id, payload.question, payload.quiz_topic)
    return RevisionQuestionOut.model_validate(entry)


@router.get(
    path="/questions",
    name="review-hub:list",
    response_model=RevisionQuestionsListResponse,
    status_code=fastapi.status.HTTP_200_OK,
)
async def list_questions(
    user_id: str = fastapi.Depends(get_current_user_id),
    revisions: RevisionService = fastapi.Depends(get_revision_service),
) -> RevisionQuestionsListResponse:
    items = [RevisionQuestionOut.model_validate(entry) for entry in await revisions.list(user_id)]
    return RevisionQuestionsListResponse(items=items, count=len(items))


@router.delete(
    path="/questions/{revision_id}",
    name="review-hub:untag",
    status_code=fastapi.status.HTTP_204_NO_CONTENT,
    summary="Remove a tagged question; removals from the Review Hub are logged to history",
)
async def untag_question(
    revision_id: int,
    from_review_hub: bool = fastapi.Query(default=False, alias="fromReviewHub"),
    user_id: str = fastapi.Depends(get_current_user_id),
    revisions: RevisionService = fastapi.Depends(get_revision_service),
) -> fastapi.Response:
    try:
        await revisions.untag(user_id, revision_id, from_review_hub=from_review_hub)
    except EntityDoesNotExist:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail="Revision question not found")
    return fastapi.Response(status_code=fastapi.status.HTTP_204_NO_CONTENT)
