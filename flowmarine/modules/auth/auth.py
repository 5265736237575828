"""JWT authentication dependency for FastAPI.

Validates Bearer tokens from the Authorization header and turns the claims
into an ``AuthenticatedUser``.
"""

import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from flowmarine.config import settings
from flowmarine.exceptions import ForbiddenException, UnauthorizedException
from flowmarine.models.enums import UserRole

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    id: uuid.UUID
    email: str
    role: UserRole


def _decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency returning the caller; also stored on ``request.state.user``."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)

    try:
        user = AuthenticatedUser(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload.get("role", UserRole.VESSEL_CREW.value)),
        )
    except (KeyError, ValueError) as exc:
        raise UnauthorizedException("Token is missing required claims") from exc

    request.state.user = user
    return user


def require_roles(user: AuthenticatedUser, roles: set[UserRole]) -> None:
    """Raise ForbiddenException unless the user holds one of ``roles``."""
    if user.role not in roles:
        raise ForbiddenException(
            "Insufficient permissions for this action",
            code="INSUFFICIENT_PERMISSIONS",
        )
