import fastapi

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_progress_service
from src.models.schemas.history import HistoryCreate, HistoryListResponse, HistoryOut
from src.services.progress import ProgressService
from src.utilities.exceptions.database import EntityDoesNotExist


router = fastapi.APIRouter(prefix="/history", tags=["history"])


@router.get(
    path="",
    name="history:list",
    response_model=HistoryListResponse,
    status_code=fastapi.status.HTTP_200_OK,
    summary="Most recent completed sessions, newest first",
)
async def list_history(
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> HistoryListResponse:
    records = await progress.list_history(user_id)
    items = [HistoryOut.model_validate(record) for record in records]
    return HistoryListResponse(items=items, count=len(items))


@router.get(
    path="/{history_id}",
    name="history:get",
    response_model=HistoryOut,
    status_code=fastapi.status.HTTP_200_OK,
)
async def get_history(
    history_id: int,
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> HistoryOut:
    try:
        record = await progress.get_history(user_id, history_id)
    except EntityDoesNotExist:
        raise fastapi.HTTPException(status_code=fastapi.status.HTTP_404_NOT_FOUND, detail="History record not found")
    return HistoryOut.model_validate(record)


@router.post(
    path="",
    name="history:record",
    response_model=HistoryOut,
    status_code=fastapi.status.HTTP_201_CREATED,
    summary="Record a completed practice session (updates streak and badges)",
)
async def record_history(
    payload: HistoryCreate,
    user_id: str = fastapi.Depends(get_current_user_id),
    progress: ProgressService = fastapi.Depends(get_progress_service),
) -> HistoryOut:
    record = await progress.record_session(user_id, payload)
    return HistoryOut.model_validate(record)
