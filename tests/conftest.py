"""Shared pytest fixtures for FlowMarine tests."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from flowmarine.app import app
from flowmarine.database.session import get_db
from flowmarine.models.enums import UserRole
from flowmarine.modules.auth.auth import AuthenticatedUser, get_current_user


@asynccontextmanager
async def _savepoint():
    yield


@pytest.fixture
def mock_db():
    """A mock AsyncSession whose begin_nested() works as an async context manager."""
    session = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.begin_nested = MagicMock(side_effect=lambda: _savepoint())
    return session


def make_user(role: UserRole = UserRole.PROCUREMENT_MANAGER) -> AuthenticatedUser:
    return AuthenticatedUser(
        id=uuid.uuid4(),
        email="buyer@flowmarine.test",
        role=role,
    )


@pytest.fixture
def procurement_user() -> AuthenticatedUser:
    return make_user(UserRole.PROCUREMENT_MANAGER)


@pytest.fixture
def crew_user() -> AuthenticatedUser:
    return make_user(UserRole.VESSEL_CREW)


@pytest_asyncio.fixture
async def async_client(mock_db, procurement_user) -> AsyncGenerator[AsyncClient, None]:
    """An httpx AsyncClient wired to the app with a mocked session and user."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: procurement_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
