"""Shared test fixtures for backend tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from worktrack.auth.context import Principal
from worktrack.auth.engine import get_default_engine
from worktrack.auth.jwt import create_access_token
from worktrack.auth.roles import Role
from worktrack.main import app


def _make_auth_header(user_id: int, role: str, email: str | None = None) -> dict:
    """Create an Authorization header with a valid JWT."""
    token = create_access_token(user_id, email or f"user{user_id}@worktrack.test", role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def principal():
    """Factory: principal(role, id=1)."""
    def _make(role: Role, user_id: int = 1) -> Principal:
        return Principal(id=user_id, role=role)
    return _make


@pytest.fixture
def restore_default_matrix():
    """Put the process-wide matrix back after a test swaps it."""
    engine = get_default_engine()
    original = engine.matrix
    yield engine
    engine.swap_matrix(original)


@pytest_asyncio.fixture
async def anon_client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with no authentication."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def client_as():
    """Factory: `async with client_as(Role.HR_MANAGER, user_id=7) as client: ...`"""
    def _make(role: Role, user_id: int = 1) -> AsyncClient:
        transport = ASGITransport(app=app)
        return AsyncClient(
            transport=transport,
            base_url="http://test",
            headers=_make_auth_header(user_id, role.value),
        )
    return _make


@pytest_asyncio.fixture
async def admin_client(client_as) -> AsyncGenerator[AsyncClient, None]:
    async with client_as(Role.ADMIN, user_id=1) as client:
        yield client


@pytest_asyncio.fixture
async def hr_client(client_as) -> AsyncGenerator[AsyncClient, None]:
    async with client_as(Role.HR_MANAGER, user_id=7) as client:
        yield client


@pytest_asyncio.fixture
async def engineer_client(client_as) -> AsyncGenerator[AsyncClient, None]:
    async with client_as(Role.ENGINEER, user_id=42) as client:
        yield client
