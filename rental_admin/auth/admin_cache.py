from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from cachetools import TTLCache

from rental_admin.models.auth import AdminRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
GATE_ROLE = "admin"

_MISSING = object()


class AdminLookup(Protocol):
    async def get_admin(self, user_id: str, role: str = "admin") -> Optional[AdminRecord]: ...


class AdminRoleCache:
    """Time-bounded map of user id -> admin record (or ``None``).

    Negative results are cached like positive ones. Registry errors are not
    cached and propagate to the caller. Concurrent misses for the same user
    may both hit the registry; the second write simply wins.
    """

    def __init__(
        self,
        registry: AdminLookup,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._entries: TTLCache[str, Optional[AdminRecord]] = TTLCache(
            maxsize=max_size, ttl=ttl_seconds, timer=timer
        )

    async def get_admin_status(self, user_id: str) -> Optional[AdminRecord]:
        cached = self._entries.get(user_id, _MISSING)
        if cached is not _MISSING:
            logger.debug("Admin cache HIT: %s", user_id)
            return cached

        logger.debug("Admin cache MISS: %s", user_id)
        record = await self._registry.get_admin(user_id, role=GATE_ROLE)
        self._entries[user_id] = record
        return record

    def invalidate(self, user_id: str) -> None:
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
