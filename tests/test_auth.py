"""Tests for JWT bearer authentication."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from flowmarine.config import settings
from flowmarine.exceptions import UnauthorizedException
from flowmarine.models.enums import UserRole
from flowmarine.modules.auth.auth import get_current_user


def _token(claims: dict, secret: str | None = None) -> HTTPAuthorizationCredentials:
    payload = {"exp": datetime.now(UTC) + timedelta(minutes=5), **claims}
    encoded = jwt.encode(payload, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=encoded)


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_valid_token(self):
        user_id = uuid.uuid4()
        request = MagicMock()

        user = await get_current_user(
            request,
            _token({"sub": str(user_id), "email": "pm@flowmarine.test", "role": "PROCUREMENT_MANAGER"}),
        )

        assert user.id == user_id
        assert user.role == UserRole.PROCUREMENT_MANAGER
        assert request.state.user is user

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(UnauthorizedException, match="Authentication required"):
            await get_current_user(MagicMock(), None)

    @pytest.mark.asyncio
    async def test_wrong_signature(self):
        credentials = _token({"sub": str(uuid.uuid4()), "email": "x@y.test"}, secret="not-the-key")
        with pytest.raises(UnauthorizedException, match="Invalid or expired"):
            await get_current_user(MagicMock(), credentials)

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self):
        credentials = _token({"sub": str(uuid.uuid4()), "email": "x@y.test", "role": "PIRATE"})
        with pytest.raises(UnauthorizedException, match="missing required claims"):
            await get_current_user(MagicMock(), credentials)

    @pytest.mark.asyncio
    async def test_missing_email_rejected(self):
        with pytest.raises(UnauthorizedException):
            await get_current_user(MagicMock(), _token({"sub": str(uuid.uuid4())}))
