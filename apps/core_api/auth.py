"""
Bearer token authentication (python-jose).

Sessions are owned by the production app; this service only needs the
user id. The token's `sub` claim becomes `ToolContext.user_id`, and project
membership is checked separately against the production API.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt
from pydantic import BaseModel

from slate_config.settings import Settings

settings = Settings()


class User(BaseModel):
    """Authenticated caller."""

    user_id: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def validate_jwt(authorization_header: str) -> User:
    """
    Decode an `Authorization: Bearer <token>` header into a User.

    Raises:
        HTTPException: 401 for a wrong scheme, bad signature, expired token
            or a token without a subject
    """
    scheme, _, token = authorization_header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Invalid authorization header format. Expected 'Bearer <token>'")

    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {e}") from e

    subject = claims.get("sub")
    if not subject:
        raise _unauthorized("Token missing 'sub' claim")

    return User(user_id=str(subject))


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Issue a signed token for `user_id`. Used by tests and local tooling."""
    issued = datetime.now(timezone.utc)
    lifetime = settings.JWT_EXPIRATION_MINUTES if expires_minutes is None else expires_minutes

    claims: dict[str, Any] = {
        "sub": user_id,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=lifetime)).timestamp()),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
