from __future__ import annotations

from fastapi import Request

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.config import Settings
from rental_admin.services.admin_registry import AdminRegistry
from rental_admin.services.supabase_auth import SupabaseAuthClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_store(request: Request) -> SupabaseAuthClient:
    return request.app.state.credential_store


def get_admin_registry(request: Request) -> AdminRegistry:
    return request.app.state.admin_registry


def get_admin_cache(request: Request) -> AdminRoleCache:
    return request.app.state.admin_cache
