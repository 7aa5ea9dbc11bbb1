"""Shared test fixtures."""

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Settings are read at import time; provide dummy Supabase config.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-hs256")
os.environ.pop("OPERATOR_ALERT_EMAIL", None)

from printorder.core.dependencies import get_member_repo, get_order_repo  # noqa: E402
from printorder.main import app  # noqa: E402
from printorder.services.order_pipeline import OrderIntakePipeline  # noqa: E402
from printorder.services.order_validator import OrderValidator  # noqa: E402
from tests.helpers import InMemoryMemberRepository, InMemoryOrderRepository  # noqa: E402


@pytest.fixture
def validator() -> OrderValidator:
    return OrderValidator()


@pytest.fixture
def repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def members() -> InMemoryMemberRepository:
    members = InMemoryMemberRepository()
    members.add("auth-admin", "ADMIN")
    members.add("auth-staff", "STAFF")
    members.add("auth-suspended", "ADMIN", status=False)
    return members


@pytest.fixture
def pipeline(repo: InMemoryOrderRepository) -> OrderIntakePipeline:
    return OrderIntakePipeline(repo, timeout=1.0, read_retries=1)


@pytest.fixture
async def client(
    repo: InMemoryOrderRepository,
    members: InMemoryMemberRepository,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with the Supabase repositories swapped for fakes."""
    app.dependency_overrides[get_order_repo] = lambda: repo
    app.dependency_overrides[get_member_repo] = lambda: members
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
