from __future__ import annotations

import time
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from rental_admin.api import admin_routes, auth_routes, health, pages
from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.auth.middleware import (
    AuthorizationMiddleware,
    FailureMode,
    UnauthorizedError,
    unauthorized_handler,
)
from rental_admin.auth.routes import api_classifier, page_classifier
from rental_admin.auth.session import SessionResolver
from rental_admin.common.system_logger import configure_from_settings, get_logger
from rental_admin.config import Settings, get_settings
from rental_admin.services.admin_registry import AdminRegistry
from rental_admin.services.supabase_auth import SupabaseAuthClient

logger = get_logger()


def create_app(
    settings: Optional[Settings] = None,
    credential_store: Optional[SupabaseAuthClient] = None,
    admin_registry: Optional[AdminRegistry] = None,
    admin_cache: Optional[AdminRoleCache] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_from_settings(settings)

    credential_store = credential_store or SupabaseAuthClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        timeout=settings.CREDENTIAL_STORE_TIMEOUT_SECONDS,
    )
    admin_registry = admin_registry or AdminRegistry(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout=settings.ADMIN_REGISTRY_TIMEOUT_SECONDS,
    )
    admin_cache = admin_cache or AdminRoleCache(
        admin_registry,
        ttl_seconds=settings.ADMIN_CACHE_TTL_SECONDS,
        max_size=settings.ADMIN_CACHE_MAX_SIZE,
    )
    resolver = SessionResolver(credential_store, settings)

    app = FastAPI(title="Rental Admin", version="0.1.0")
    app.state.settings = settings
    app.state.credential_store = credential_store
    app.state.admin_registry = admin_registry
    app.state.admin_cache = admin_cache
    app.add_exception_handler(UnauthorizedError, unauthorized_handler)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(health.router)
    api_router.include_router(auth_routes.router)
    api_router.include_router(admin_routes.router)
    app.include_router(api_router)
    app.include_router(pages.router)

    # Added last-to-first: CORS wraps logging, which wraps both auth layers.
    app.add_middleware(
        AuthorizationMiddleware,
        classifier=api_classifier(),
        resolver=resolver,
        admin_cache=admin_cache,
        failure_mode=FailureMode.JSON,
    )
    app.add_middleware(
        AuthorizationMiddleware,
        classifier=page_classifier(),
        resolver=resolver,
        admin_cache=admin_cache,
        failure_mode=FailureMode.REDIRECT,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log method, path, status and duration. Bodies and cookies are never logged."""
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)"
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Cookie"],
        max_age=86400,
    )

    logger.info("Rental admin app created (environment=%s)", settings.ENVIRONMENT)
    return app
