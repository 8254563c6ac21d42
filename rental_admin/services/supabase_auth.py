"""Supabase GoTrue client used as the credential store.

Only the four calls the dashboard needs are wrapped: password sign-in,
refresh-token exchange, user lookup and sign-out. Token format and
verification stay inside Supabase; this client treats tokens as opaque
strings.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from rental_admin.auth.errors import (
    CredentialStoreError,
    CredentialStoreUnavailable,
    InvalidSessionError,
)
from rental_admin.models.auth import AuthSession, AuthUser

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class SupabaseAuthClient:
    """HTTP client for the Supabase auth (GoTrue) REST API."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth_base = f"{base_url.rstrip('/')}/auth/v1"
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        h = {
            "apikey": self._anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            h["Authorization"] = f"Bearer {access_token}"
        return h

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        url = f"{self._auth_base}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method, url, params=params, json=json_body, headers=self._headers(access_token)
                )
        except httpx.TimeoutException as exc:
            logger.warning("Credential store timed out on %s %s", method, path)
            raise CredentialStoreUnavailable("credential store timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Credential store unreachable on %s %s: %s", method, path, type(exc).__name__)
            raise CredentialStoreUnavailable("credential store unreachable") from exc

        if resp.status_code >= 500:
            logger.warning("Credential store returned %s on %s %s", resp.status_code, method, path)
            raise CredentialStoreUnavailable(f"credential store returned {resp.status_code}")
        if resp.status_code >= 400:
            logger.info("Credential store rejected %s %s with %s", method, path, resp.status_code)
            raise InvalidSessionError(f"credential store returned {resp.status_code}")
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as exc:
            raise CredentialStoreError("credential store returned a non-JSON body") from exc
        if not isinstance(data, dict):
            logger.info("Credential store answered %s %s with a non-object body", method, path)
            raise InvalidSessionError("credential store returned a non-object body")
        return data

    @staticmethod
    def _parse_session(data: dict[str, Any]) -> AuthSession:
        if not data.get("access_token") or not data.get("refresh_token") or not data.get("user"):
            raise InvalidSessionError("credential store response did not contain a session")
        try:
            return AuthSession.model_validate(data)
        except ValidationError as exc:
            raise InvalidSessionError("credential store returned a malformed session") from exc

    async def refresh_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """Exchange the refresh token for a brand new access/refresh pair."""
        data = await self._request(
            "POST",
            "token",
            params={"grant_type": "refresh_token"},
            json_body={"refresh_token": refresh_token},
            access_token=access_token,
        )
        return self._parse_session(data)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = await self._request(
            "POST",
            "token",
            params={"grant_type": "password"},
            json_body={"email": email, "password": password},
        )
        return self._parse_session(data)

    async def get_user(self, access_token: str) -> AuthUser:
        data = await self._request("GET", "user", access_token=access_token)
        if not data.get("id"):
            raise InvalidSessionError("credential store returned no user")
        try:
            return AuthUser.model_validate(data)
        except ValidationError as exc:
            raise InvalidSessionError("credential store returned a malformed user") from exc

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "logout", access_token=access_token)
