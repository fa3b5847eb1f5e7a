"""
Bearer-token authentication for API endpoints.

Tokens are issued elsewhere; this service only checks the signature and
reads the user id from the ``sub`` claim.
"""

import structlog
from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt

from ...core.config import Settings, get_settings

logger = structlog.get_logger()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str, settings: Settings) -> str | None:
    """
    Decode a JWT and return its subject.

    Args:
        token: Encoded JWT
        settings: Source of the signing secret and algorithm

    Returns:
        The ``sub`` claim, or None when the token is invalid, expired or has no subject
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning("Token verification failed", error=str(e))
        return None

    subject = claims.get("sub")
    if not subject:
        logger.warning("Token has no subject claim")
        return None

    return str(subject)


async def get_current_user_id(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Resolve the calling user from ``Authorization: Bearer <token>``.

    Raises:
        HTTPException: 401 when the header is missing or malformed, or the token fails verification
    """
    if not authorization:
        raise _unauthorized("Authorization header required")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip() or " " in token.strip():
        raise _unauthorized("Invalid authorization header format. Expected: Bearer <token>")

    user_id = verify_token(token.strip(), settings)
    if user_id is None:
        raise _unauthorized("Invalid or expired token")

    return user_id
