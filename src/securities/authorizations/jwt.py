from jose import jwt as jose_jwt, JWTError as JoseJWTError

from src.config.manager import settings


class JWTGenerator:
    """Verifies bearer tokens minted by the identity provider.

    Sign-in lives outside this service; the only thing we need from a token is
    the stable user identifier carried in its ``sub`` claim.
    """

    def retrieve_user_id_from_token(self, token: str, secret_key: str) -> str:
        options = {"verify_aud": settings.JWT_AUDIENCE is not None}
        try:
            payload = jose_jwt.decode(
                token=token,
                key=secret_key,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                options=options,
            )
        except JoseJWTError as token_decode_error:
            raise ValueError("Unable to decode JWT Token") from token_decode_error

        user_id = payload.get("sub")
        if not user_id:
            raise ValueError("JWT Token carries no subject")
        return str(user_id)


def get_jwt_generator() -> JWTGenerator:
    return JWTGenerator()


jwt_generator: JWTGenerator = get_jwt_generator()
