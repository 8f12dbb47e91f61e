import fastapi
import uvicorn
from dotenv import load_dotenv
from fastapi.middleware.cors import CORSMiddleware

from src.api.endpoints import router as api_endpoint_router
from src.config.events import (
    execute_backend_server_event_handler,
    terminate_backend_server_event_handler,
)
from src.config.manager import settings


def initialize_backend_application() -> fastapi.FastAPI:
    # Load environment variables from .env if present
    load_dotenv()
    app = fastapi.FastAPI(**settings.set_backend_app_attributes)  # type: ignore

    # Tags metadata for Swagger grouping
    tags_metadata = [
        {
            "name": "history",
            "description": "Completed practice sessions, newest first.",
        },
        {
            "name": "progress",
            "description": "Streak, badges, improvement goals and the progress dashboard.",
        },
        {"name": "review-hub", "description": "Aptitude questions tagged for revision."},
        {
            "name": "aptitude",
            "description": "Practice and diagnostic aptitude quizzes with save/resume.",
        },
        {
            "name": "mock-interview",
            "description": "Timed Aptitude, Technical and HR mock interview with an overall report.",
        },
        {
            "name": "practice",
            "description": "Open-ended technical and HR interview practice with per-answer feedback.",
        },
        {"name": "group-discussion", "description": "Timed group discussion with two AI participants."},
        {"name": "profile-review", "description": "Recruiter-style review of a resume for a target role."},
    ]
    # Attach tag descriptions to OpenAPI
    app.openapi_tags = tags_metadata  # type: ignore[attr-defined]

    if not settings.DESCRIPTION:
        app.description = "APIs for interview preparation: progress tracking, badges, goals, aptitude quizzes, practice interviews, group discussions, profile reviews and mock interviews."

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=settings.IS_ALLOWED_CREDENTIALS,
        allow_methods=settings.ALLOWED_METHODS,
        allow_headers=settings.ALLOWED_HEADERS,
    )

    app.add_event_handler(
        "startup",
        execute_backend_server_event_handler(backend_app=app),
    )
    app.add_event_handler(
        "shutdown",
        terminate_backend_server_event_handler(backend_app=app),
    )

    app.include_router(router=api_endpoint_router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to PrepHub Backend API",
            "version": settings.VERSION,
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


backend_app: fastapi.FastAPI = initialize_backend_application()

if __name__ == "__main__":
    uvicorn.run(
        app="src.main:backend_app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        workers=settings.SERVER_WORKERS,
        log_level=settings.LOGGING_LEVEL,
    )
