import fastapi

from src.api.routes.aptitude import router as aptitude_router
from src.api.routes.history import router as history_router
from src.api.routes.mock_interview import router as mock_interview_router
from src.api.routes.practice import discussion_router, practice_router, profile_review_router
from src.api.routes.progress import router as progress_router
from src.api.routes.review_hub import router as review_hub_router

router = fastapi.APIRouter()

# Health check endpoint for ECS/Load Balancer
@router.get("/health", status_code=200)
async def health_check():
    return {"status": "healthy", "service": "prephub-backend"}

router.include_router(router=history_router)
router.include_router(router=progress_router)
router.include_router(router=review_hub_router)
router.include_router(router=aptitude_router)
router.include_router(router=mock_interview_router)
router.include_router(router=practice_router)
router.include_router(router=discussion_router)
router.include_router(router=profile_review_router)
