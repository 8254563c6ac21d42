from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.auth.errors import AdminRegistryError
from rental_admin.services.admin_registry import AdminRegistry
from tests.conftest import ADMIN_USER_ID, FakeClock, make_admin


def _registry(result=None) -> MagicMock:
    registry = MagicMock(spec=AdminRegistry)
    registry.get_admin = AsyncMock(return_value=result)
    return registry


@pytest.mark.asyncio
async def test_lookups_within_ttl_hit_cache_then_requery_after_expiry() -> None:
    clock = FakeClock()
    registry = _registry(make_admin())
    cache = AdminRoleCache(registry, ttl_seconds=300, timer=clock)

    first = await cache.get_admin_status(ADMIN_USER_ID)
    clock.advance(120)
    second = await cache.get_admin_status(ADMIN_USER_ID)
    assert first == second == make_admin()
    assert registry.get_admin.await_count == 1

    clock.advance(181)
    await cache.get_admin_status(ADMIN_USER_ID)
    assert registry.get_admin.await_count == 2


@pytest.mark.asyncio
async def test_registry_is_asked_for_admin_role_only() -> None:
    registry = _registry(make_admin())
    cache = AdminRoleCache(registry, timer=FakeClock())
    await cache.get_admin_status(ADMIN_USER_ID)
    registry.get_admin.assert_awaited_once_with(ADMIN_USER_ID, role="admin")


@pytest.mark.asyncio
async def test_negative_result_is_cached() -> None:
    registry = _registry(None)
    cache = AdminRoleCache(registry, timer=FakeClock())

    assert await cache.get_admin_status("not-an-admin") is None
    assert await cache.get_admin_status("not-an-admin") is None
    assert registry.get_admin.await_count == 1


@pytest.mark.asyncio
async def test_invalidate_forces_requery() -> None:
    registry = _registry(None)
    cache = AdminRoleCache(registry, timer=FakeClock())
    await cache.get_admin_status(ADMIN_USER_ID)

    registry.get_admin.return_value = make_admin()
    cache.invalidate(ADMIN_USER_ID)
    assert await cache.get_admin_status(ADMIN_USER_ID) == make_admin()
    assert registry.get_admin.await_count == 2


@pytest.mark.asyncio
async def test_registry_errors_propagate_and_are_not_cached() -> None:
    registry = _registry()
    registry.get_admin.side_effect = AdminRegistryError("boom")
    cache = AdminRoleCache(registry, timer=FakeClock())

    with pytest.raises(AdminRegistryError):
        await cache.get_admin_status(ADMIN_USER_ID)
    assert len(cache) == 0

    registry.get_admin.side_effect = None
    registry.get_admin.return_value = make_admin()
    assert await cache.get_admin_status(ADMIN_USER_ID) == make_admin()


@pytest.mark.asyncio
async def test_users_are_cached_independently() -> None:
    registry = _registry(None)
    cache = AdminRoleCache(registry, timer=FakeClock())
    await cache.get_admin_status("a")
    await cache.get_admin_status("b")
    assert registry.get_admin.await_count == 2

    cache.clear()
    assert len(cache) == 0
