from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from rental_admin.auth.cookies import CookiePatch, read_session_tokens, rotated_session_cookies
from rental_admin.auth.errors import (
    AuthFailure,
    CredentialStoreError,
    InvalidSessionError,
)
from rental_admin.config import Settings
from rental_admin.models.auth import AuthSession, Identity

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    async def refresh_session(self, access_token: str, refresh_token: str) -> AuthSession: ...


@dataclass(frozen=True)
class SessionResolution:
    identity: Optional[Identity] = None
    refreshed_cookies: Optional[CookiePatch] = None
    auth_error: bool = False
    failure: Optional[AuthFailure] = None

    @property
    def ok(self) -> bool:
        return self.identity is not None


class SessionResolver:
    """Turns request cookies into an identity plus the rotated cookie pair.

    Every call re-establishes the session with the credential store, so
    tokens rotate on each protected request. Nothing here touches the
    response; the caller applies ``refreshed_cookies``.
    """

    def __init__(self, store: CredentialStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    async def resolve(self, cookies: Mapping[str, str]) -> SessionResolution:
        access_token, refresh_token = read_session_tokens(dict(cookies))
        if not access_token or not refresh_token:
            return SessionResolution(failure=AuthFailure.NO_CREDENTIALS)

        try:
            session = await self._store.refresh_session(access_token, refresh_token)
        except InvalidSessionError:
            return SessionResolution(auth_error=True, failure=AuthFailure.INVALID_SESSION)
        except CredentialStoreError:
            # Fail closed, no retry.
            return SessionResolution(auth_error=True, failure=AuthFailure.STORE_UNAVAILABLE)

        if session is None:
            return SessionResolution(auth_error=True, failure=AuthFailure.INVALID_SESSION)

        identity = Identity(user_id=session.user.id, email=session.user.email)
        logger.debug("Session refreshed for %s", identity.email)
        return SessionResolution(
            identity=identity,
            refreshed_cookies=rotated_session_cookies(session, self._settings),
        )
