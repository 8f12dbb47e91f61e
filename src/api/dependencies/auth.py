import fastapi
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src.config.manager import settings
from src.securities.authorizations.jwt import jwt_generator

# Create HTTPBearer security scheme for Swagger UI
security = HTTPBearer()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = fastapi.Depends(security),
) -> str:
    token = credentials.credentials
    try:
        return jwt_generator.retrieve_user_id_from_token(token=token, secret_key=settings.JWT_SECRET_KEY)
    except ValueError:
        raise fastapi.HTTPException(
            status_code=fastapi.status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
