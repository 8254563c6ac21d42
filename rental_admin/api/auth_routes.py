"""Login, logout and session endpoints.

``/api/auth/login``, ``/api/auth/logout`` and ``/api/auth/session`` bypass the
authorization middleware; ``/api/auth/me`` sits behind the admin gate.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.auth.cookies import (
    ACCESS_TOKEN_COOKIE,
    ADMIN_SESSION_COOKIE,
    SESSION_EXPIRY_COOKIE,
    admin_login_cookies,
    clear_all_auth_cookies,
)
from rental_admin.auth.errors import (
    AdminRegistryError,
    CredentialStoreError,
    CredentialStoreUnavailable,
    InvalidSessionError,
)
from rental_admin.auth.middleware import current_identity
from rental_admin.common.system_logger import get_logger
from rental_admin.config import Settings
from rental_admin.dependencies import get_admin_cache, get_credential_store, get_settings
from rental_admin.models.auth import Identity, LoginRequest
from rental_admin.services.supabase_auth import SupabaseAuthClient

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger()

NO_STORE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


def permissions_for(role: str) -> dict[str, bool]:
    manages = role in ("admin", "super_admin")
    return {
        "can_manage_users": manages,
        "can_manage_products": True,
        "can_manage_orders": True,
        "can_manage_coupons": manages,
        "can_view_analytics": True,
        "can_manage_admins": role == "super_admin",
    }


@router.post("/login")
async def login(
    body: LoginRequest,
    settings: Settings = Depends(get_settings),
    store: SupabaseAuthClient = Depends(get_credential_store),
    admin_cache: AdminRoleCache = Depends(get_admin_cache),
) -> JSONResponse:
    if not body.email or not body.password:
        return _error(400, "Email and password are required")

    email = body.email.strip().lower()
    try:
        session = await store.sign_in_with_password(email, body.password)
    except InvalidSessionError:
        logger.info("Login rejected for %s", email)
        return _error(401, "Invalid credentials")
    except CredentialStoreError:
        logger.warning("Login failed for %s: credential store unavailable", email)
        return _error(503, "Authentication service unavailable")

    try:
        admin = await admin_cache.get_admin_status(session.user.id)
    except AdminRegistryError:
        logger.error("Admin lookup failed during login for %s", email, exc_info=True)
        return _error(500, "Internal server error")

    if admin is None:
        logger.info("Login denied for %s: not an admin", email)
        return _error(403, "Access denied. Administrator permissions required.")

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=settings.extended_session_seconds)
    response = JSONResponse(
        content={
            "success": True,
            "data": {
                "user": {"id": session.user.id, "email": session.user.email, "role": admin.role},
                "session": {
                    "expires_at": expires_at.isoformat(),
                    "is_extended": True,
                    "duration_days": settings.EXTENDED_SESSION_DAYS,
                },
                "admin": {"verified": True, "role": admin.role, "email": admin.email},
            },
        },
        headers=NO_STORE,
    )
    admin_login_cookies(session, settings, now=now).apply(response)
    logger.info("Admin %s logged in, session until %s", admin.email, expires_at.date().isoformat())
    return response


@router.post("/logout")
async def logout(
    request: Request,
    store: SupabaseAuthClient = Depends(get_credential_store),
) -> JSONResponse:
    access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if access_token:
        try:
            await store.sign_out(access_token)
        except CredentialStoreError as e:
            # Cookies are cleared regardless; the token simply expires upstream.
            logger.warning(f"Sign-out at credential store failed: {type(e).__name__}")

    response = JSONResponse(content={"success": True, "message": "Logged out successfully"})
    clear_all_auth_cookies().apply(response)
    return response


@router.get("/session")
async def session_info(
    request: Request,
    store: SupabaseAuthClient = Depends(get_credential_store),
) -> JSONResponse:
    access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not access_token:
        return JSONResponse(status_code=401, content={"error": "No active session"})

    try:
        user = await store.get_user(access_token)
    except CredentialStoreUnavailable:
        return JSONResponse(status_code=503, content={"error": "Authentication service unavailable"})
    except CredentialStoreError:
        return JSONResponse(status_code=401, content={"error": "No active session"})

    return JSONResponse(
        content={
            "session": {
                "user": {"id": user.id, "email": user.email},
                # Advisory values for the UI only.
                "expires_at": request.cookies.get(SESSION_EXPIRY_COOKIE),
                "is_extended": request.cookies.get(ADMIN_SESSION_COOKIE) == "true",
            }
        },
        headers=NO_STORE,
    )


@router.get("/me")
async def me(request: Request, identity: Identity = Depends(current_identity)) -> JSONResponse:
    admin = request.state.admin
    return JSONResponse(
        content={
            "success": True,
            "data": {
                "id": identity.user_id,
                "email": identity.email,
                "role": admin.role,
                "created_at": admin.created_at.isoformat() if admin.created_at else None,
                "permissions": permissions_for(admin.role),
            },
        },
        headers=NO_STORE,
    )
