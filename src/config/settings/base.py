import logging
import pathlib

import decouple
import pydantic
from pydantic_settings import BaseSettings

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).parent.parent.parent.parent.resolve()


class BackendBaseSettings(BaseSettings):
    TITLE: str = "PrepHub Backend API"
    VERSION: str = "0.1.0"
    # Calendar-day boundary for streaks and the weekend badge rule
    TIMEZONE: str = decouple.config("TIMEZONE", cast=str, default="UTC")  # type: ignore
    DESCRIPTION: str | None = None
    DEBUG: bool = False
    ENVIRONMENT: str = "DEV"  # Default environment, overridden by subclasses

    SERVER_HOST: str = decouple.config("BACKEND_SERVER_HOST", cast=str, default="127.0.0.1")  # type: ignore
    SERVER_PORT: int = decouple.config("BACKEND_SERVER_PORT", cast=int, default=8000)  # type: ignore
    SERVER_WORKERS: int = decouple.config("BACKEND_SERVER_WORKERS", cast=int, default=1)  # type: ignore
    API_PREFIX: str = "/api"
    DOCS_URL: str = "/docs"
    OPENAPI_URL: str = "/openapi.json"
    REDOC_URL: str = "/redoc"

    DB_POSTGRES_HOST: str = decouple.config("POSTGRES_HOST", cast=str, default="localhost")  # type: ignore
    DB_MAX_POOL_CON: int = decouple.config("DB_MAX_POOL_CON", cast=int, default=80)  # type: ignore
    DB_POSTGRES_NAME: str = decouple.config("POSTGRES_DB", cast=str, default="prephub")  # type: ignore
    DB_POSTGRES_PASSWORD: str = decouple.config("POSTGRES_PASSWORD", cast=str, default="postgres")  # type: ignore
    DB_POOL_SIZE: int = decouple.config("DB_POOL_SIZE", cast=int, default=20)  # type: ignore
    DB_POOL_OVERFLOW: int = decouple.config("DB_POOL_OVERFLOW", cast=int, default=10)  # type: ignore
    DB_POSTGRES_PORT: int = decouple.config("POSTGRES_PORT", cast=int, default=5432)  # type: ignore
    DB_POSTGRES_SCHEMA: str = decouple.config("POSTGRES_SCHEMA", cast=str, default="postgresql")  # type: ignore
    DB_TIMEOUT: int = decouple.config("DB_TIMEOUT", cast=int, default=30)  # type: ignore
    DB_POSTGRES_USERNAME: str = decouple.config("POSTGRES_USERNAME", cast=str, default="postgres")  # type: ignore
    DB_SSL_REQUIRED: bool = decouple.config("DB_SSL_REQUIRED", cast=bool, default=False)  # type: ignore
    # Full async URL (e.g. sqlite+aiosqlite:///./prephub.db); overrides the POSTGRES_* settings
    DATABASE_URL: str | None = decouple.config("DATABASE_URL", default=None)  # type: ignore

    IS_DB_ECHO_LOG: bool = decouple.config("IS_DB_ECHO_LOG", cast=bool, default=False)  # type: ignore
    IS_DB_FORCE_ROLLBACK: bool = decouple.config("IS_DB_FORCE_ROLLBACK", cast=bool, default=False)  # type: ignore
    IS_DB_EXPIRE_ON_COMMIT: bool = decouple.config("IS_DB_EXPIRE_ON_COMMIT", cast=bool, default=False)  # type: ignore
    # Create missing tables on startup (local development without Alembic)
    IS_DB_AUTO_CREATE: bool = decouple.config("IS_DB_AUTO_CREATE", cast=bool, default=False)  # type: ignore

    # Tokens are issued by the external identity provider; we only verify them
    JWT_SECRET_KEY: str = decouple.config("JWT_SECRET_KEY", cast=str, default="change-me-jwt-secret")  # type: ignore
    JWT_ALGORITHM: str = decouple.config("JWT_ALGORITHM", cast=str, default="HS256")  # type: ignore
    JWT_AUDIENCE: str | None = decouple.config("JWT_AUDIENCE", default=None)  # type: ignore

    IS_ALLOWED_CREDENTIALS: bool = decouple.config("IS_ALLOWED_CREDENTIALS", cast=bool, default=True)  # type: ignore
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",  # React default port
        "http://localhost:3001",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite default port
        "http://127.0.0.1:5173",
    ]
    ALLOWED_METHODS: list[str] = ["*"]
    ALLOWED_HEADERS: list[str] = ["*"]

    LOGGING_LEVEL: int = logging.INFO
    LOGGERS: tuple[str, str] = ("uvicorn.asgi", "uvicorn.access")

    OPENAI_MODEL: str = decouple.config("OPENAI_MODEL", cast=str, default="gpt-4o-mini")  # type: ignore
    OPENAI_API_KEY: str = decouple.config("OPENAI_API_KEY", cast=str, default="")  # type: ignore
    # LLM/ OpenAI client timeout in seconds (request-level). Increase for longer prompts/outputs.
    OPENAI_TIMEOUT_SECONDS: float = decouple.config("OPENAI_TIMEOUT_SECONDS", cast=float, default=120.0)  # type: ignore

    # Progress engine knobs
    HISTORY_LIST_LIMIT: int = decouple.config("HISTORY_LIST_LIMIT", cast=int, default=100)  # type: ignore
    GOAL_ACCURACY_WINDOW: int = decouple.config("GOAL_ACCURACY_WINDOW", cast=int, default=5)  # type: ignore
    QUIZ_SNAPSHOT_SLOT: str = decouple.config("QUIZ_SNAPSHOT_SLOT", cast=str, default="aptitudeQuizInProgress")  # type: ignore
    # Live quiz / mock-interview sessions idle longer than this are dropped
    LIVE_SESSION_TTL_SECONDS: float = decouple.config("LIVE_SESSION_TTL_SECONDS", cast=float, default=4 * 3600.0)  # type: ignore

    model_config = pydantic.ConfigDict(
        case_sensitive=True,
        env_file=f"{str(ROOT_DIR)}/.env",
        validate_assignment=True,
        extra='allow'
    )

    @property
    def set_backend_app_attributes(self) -> dict[str, str | bool | None]:
        """
        Set all `FastAPI` class' attributes with the custom values defined in `BackendBaseSettings`.
        """
        return {
            "title": self.TITLE,
            "version": self.VERSION,
            "debug": self.DEBUG,
            "description": self.DESCRIPTION,
            "docs_url": self.DOCS_URL,
            "openapi_url": self.OPENAPI_URL,
            "redoc_url": self.REDOC_URL,
            "api_prefix": self.API_PREFIX,
        }
