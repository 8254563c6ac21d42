"""Authorization middleware for dashboard pages and protected API routes.

One class serves both surfaces. Pages fail with a redirect to the home page,
API routes fail with ``401 {"error": "Unauthorized"}``; the route tables and
the failure mode are chosen per instance. Failure responses never say why
the request was refused.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.auth.cookies import CookiePatch, clear_session_cookies, has_session_tokens
from rental_admin.auth.errors import AdminRegistryError, AuthFailure
from rental_admin.auth.routes import RouteClassifier
from rental_admin.auth.session import SessionResolver
from rental_admin.models.auth import Identity

logger = logging.getLogger(__name__)

UNAUTHORIZED_BODY = {"error": "Unauthorized"}


class FailureMode(str, Enum):
    REDIRECT = "redirect"
    JSON = "json"


class AuthorizationMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        *,
        classifier: RouteClassifier,
        resolver: SessionResolver,
        admin_cache: Optional[AdminRoleCache] = None,
        failure_mode: FailureMode = FailureMode.REDIRECT,
        home_path: str = "/",
        dashboard_path: str = "/dashboard",
    ) -> None:
        super().__init__(app)
        self.classifier = classifier
        self.resolver = resolver
        self.admin_cache = admin_cache
        self.failure_mode = failure_mode
        self.home_path = home_path
        self.dashboard_path = dashboard_path

    def _fail(
        self,
        request: Request,
        reason: AuthFailure,
        cookies: Optional[CookiePatch] = None,
    ) -> Response:
        logger.info(
            "Auth refused (%s) for %s %s [%s]",
            self.failure_mode.value,
            request.method,
            request.url.path,
            reason.value,
        )
        if self.failure_mode is FailureMode.JSON:
            response: Response = JSONResponse(status_code=401, content=UNAUTHORIZED_BODY)
        else:
            response = RedirectResponse(url=self.home_path, status_code=302)
        if cookies is not None:
            cookies.apply(response)
        return response

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # CORS preflight carries no cookies and must reach CORSMiddleware.
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        route = self.classifier.classify(path)

        if route.is_auth_passthrough:
            return await call_next(request)

        # Presence check only; /dashboard validates the session itself.
        if (
            self.failure_mode is FailureMode.REDIRECT
            and route.is_redirect_if_authed
            and has_session_tokens(request.cookies)
        ):
            return RedirectResponse(url=self.dashboard_path, status_code=302)

        if not route.is_protected:
            return await call_next(request)

        if not has_session_tokens(request.cookies):
            return self._fail(request, AuthFailure.NO_CREDENTIALS)

        try:
            resolution = await self.resolver.resolve(request.cookies)
        except Exception:
            logger.exception("Session resolution failed for %s %s", request.method, path)
            return self._fail(request, AuthFailure.STORE_UNAVAILABLE, clear_session_cookies())
        if resolution.auth_error:
            return self._fail(request, resolution.failure or AuthFailure.INVALID_SESSION, clear_session_cookies())
        if resolution.identity is None:
            return self._fail(request, resolution.failure or AuthFailure.NO_CREDENTIALS)

        identity = resolution.identity
        refreshed = resolution.refreshed_cookies

        if route.is_admin_only:
            if self.admin_cache is None:
                logger.error("Admin-only route %s served without an admin cache", path)
                return self._fail(request, AuthFailure.NOT_ADMIN, clear_session_cookies())
            try:
                admin = await self.admin_cache.get_admin_status(identity.user_id)
            except AdminRegistryError:
                logger.error("Admin lookup failed for %s", identity.user_id, exc_info=True)
                # Keep the rotated pair: the old refresh token is already spent.
                return self._fail(request, AuthFailure.NOT_ADMIN, refreshed)
            if admin is None:
                return self._fail(request, AuthFailure.NOT_ADMIN, clear_session_cookies())
            request.state.admin = admin

        request.state.identity = identity
        request.state.email = identity.email

        response = await call_next(request)
        if refreshed is not None:
            refreshed.apply(response)
        return response


class UnauthorizedError(Exception):
    """Raised by handlers that need an identity the middleware did not set."""


async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    return JSONResponse(status_code=401, content=UNAUTHORIZED_BODY)


def current_identity(request: Request) -> Identity:
    """FastAPI dependency for handlers behind the middleware."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthorizedError()
    return identity
