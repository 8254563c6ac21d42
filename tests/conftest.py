from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, Response

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.config import Settings
from rental_admin.main import create_app
from rental_admin.models.auth import AdminRecord, AuthSession, AuthUser
from rental_admin.services.admin_registry import AdminRegistry
from rental_admin.services.supabase_auth import SupabaseAuthClient

ADMIN_USER_ID = "11111111-1111-1111-1111-111111111111"
ADMIN_EMAIL = "admin@rentals.test"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**overrides) -> Settings:
    values = dict(
        SUPABASE_URL="https://project.supabase.test",
        SUPABASE_ANON_KEY="anon-key",
        SUPABASE_SERVICE_ROLE_KEY="service-key",
        LOG_DIR="",
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


def make_session(
    *,
    access_token: str = "new-access",
    refresh_token: str = "new-refresh",
    expires_in: Optional[int] = 1800,
    user_id: str = ADMIN_USER_ID,
    email: str = ADMIN_EMAIL,
) -> AuthSession:
    return AuthSession(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires_in,
        user=AuthUser(id=user_id, email=email),
    )


def make_admin(user_id: str = ADMIN_USER_ID, email: str = ADMIN_EMAIL, role: str = "admin") -> AdminRecord:
    return AdminRecord(
        user_id=user_id,
        email=email,
        role=role,
        created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


def session_cookies(access: str = "old-access", refresh: str = "old-refresh") -> dict[str, str]:
    return {"Cookie": f"sb-access-token={access}; sb-refresh-token={refresh}"}


def parse_set_cookies(resp: Response) -> dict[str, dict[str, str]]:
    """Map cookie name -> {"value": ..., lower-cased attribute: value}."""
    parsed: dict[str, dict[str, str]] = {}
    for header in resp.headers.get_list("set-cookie"):
        parts = [p.strip() for p in header.split(";")]
        name, _, value = parts[0].partition("=")
        attrs = {"value": value.strip('"')}
        for part in parts[1:]:
            key, _, val = part.partition("=")
            attrs[key.lower()] = val
        parsed[name] = attrs
    return parsed


def is_deleted(attrs: dict[str, str]) -> bool:
    return attrs.get("max-age") == "0" and attrs["value"] == ""


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credential_store() -> MagicMock:
    store = MagicMock(spec=SupabaseAuthClient)
    store.refresh_session = AsyncMock(return_value=make_session())
    store.sign_in_with_password = AsyncMock(return_value=make_session())
    store.get_user = AsyncMock(return_value=AuthUser(id=ADMIN_USER_ID, email=ADMIN_EMAIL))
    store.sign_out = AsyncMock(return_value=None)
    return store


@pytest.fixture
def admin_registry() -> MagicMock:
    registry = MagicMock(spec=AdminRegistry)
    registry.get_admin = AsyncMock(return_value=make_admin())
    registry.get_admin_by_user_id = AsyncMock(return_value=make_admin())
    registry.list_admins = AsyncMock(return_value=[make_admin()])
    registry.create_admin = AsyncMock()
    registry.update_admin = AsyncMock()
    registry.delete_admin = AsyncMock(return_value=True)
    return registry


@pytest.fixture
def admin_cache(admin_registry: MagicMock, clock: FakeClock) -> AdminRoleCache:
    return AdminRoleCache(admin_registry, ttl_seconds=300, timer=clock)


@pytest.fixture
def app(settings, credential_store, admin_registry, admin_cache):
    app = create_app(
        settings=settings,
        credential_store=credential_store,
        admin_registry=admin_registry,
        admin_cache=admin_cache,
    )

    @app.get("/api/guestbook")
    async def guestbook():
        return {"entries": []}

    return app


@pytest_asyncio.fixture
async def app_client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
