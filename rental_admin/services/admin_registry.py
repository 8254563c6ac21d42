"""Supabase PostgREST client for the ``admin_users`` table.

Queries run with the service-role key: the registry is the source of truth
for who may use the dashboard, so row level security must not hide rows
from the server.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from rental_admin.auth.errors import AdminRegistryError
from rental_admin.models.auth import AdminCreate, AdminRecord, AdminUpdate

logger = logging.getLogger(__name__)

ADMIN_TABLE = "admin_users"
_COLUMNS = "user_id,email,role,created_at"


class AdminRegistry:
    """Thin wrapper around PostgREST for admin lookups and management."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rest_base = f"{base_url.rstrip('/')}/rest/v1"
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        url = f"{self._rest_base}/{ADMIN_TABLE}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method, url, params=params, json=json_body, headers=self._headers()
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Admin registry %s failed with %s", method, exc.response.status_code)
            raise AdminRegistryError(f"admin registry returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Admin registry %s failed: %s", method, type(exc).__name__)
            raise AdminRegistryError("admin registry unreachable") from exc

        if resp.status_code == 204 or not resp.text:
            return []
        return resp.json()

    @staticmethod
    def _to_records(rows: list[dict[str, Any]]) -> list[AdminRecord]:
        try:
            return [AdminRecord.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise AdminRegistryError("admin registry returned a malformed row") from exc

    async def get_admin(self, user_id: str, role: str = "admin") -> AdminRecord | None:
        """Return the record for ``user_id`` holding exactly ``role``, if any."""
        rows = await self._request(
            "GET",
            params={
                "select": _COLUMNS,
                "user_id": f"eq.{user_id}",
                "role": f"eq.{role}",
                "limit": "1",
            },
        )
        records = self._to_records(rows)
        return records[0] if records else None

    async def get_admin_by_user_id(self, user_id: str) -> AdminRecord | None:
        rows = await self._request(
            "GET",
            params={"select": _COLUMNS, "user_id": f"eq.{user_id}", "limit": "1"},
        )
        records = self._to_records(rows)
        return records[0] if records else None

    async def list_admins(self) -> list[AdminRecord]:
        rows = await self._request(
            "GET",
            params={"select": _COLUMNS, "order": "created_at.desc"},
        )
        return self._to_records(rows)

    async def create_admin(self, admin: AdminCreate) -> AdminRecord:
        rows = await self._request("POST", json_body=admin.model_dump())
        records = self._to_records(rows)
        if not records:
            raise AdminRegistryError("admin registry returned no row for insert")
        return records[0]

    async def update_admin(self, user_id: str, updates: AdminUpdate) -> AdminRecord | None:
        body = updates.model_dump(exclude_none=True)
        if not body:
            return await self.get_admin_by_user_id(user_id)
        rows = await self._request(
            "PATCH",
            params={"user_id": f"eq.{user_id}"},
            json_body=body,
        )
        records = self._to_records(rows)
        return records[0] if records else None

    async def delete_admin(self, user_id: str) -> bool:
        rows = await self._request("DELETE", params={"user_id": f"eq.{user_id}"})
        return bool(rows)
