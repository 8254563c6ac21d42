"""Auth cookie names, attributes and the patches applied to responses.

Access and refresh token cookies always travel together: every patch built
here sets or deletes both of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from starlette.responses import Response

from rental_admin.config import Settings
from rental_admin.models.auth import AuthSession

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
ADMIN_SESSION_COOKIE = "sb-admin-session"
SESSION_EXPIRY_COOKIE = "sb-session-expiry"

SESSION_COOKIES = (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE)
ADVISORY_COOKIES = (ADMIN_SESSION_COOKIE, SESSION_EXPIRY_COOKIE)

SameSite = Literal["strict", "lax"]


@dataclass(frozen=True)
class CookieSpec:
    name: str
    value: str
    max_age: int
    http_only: bool = True
    secure: bool = True
    same_site: SameSite = "strict"
    path: str = "/"


@dataclass
class CookiePatch:
    """Cookie writes and deletions to apply to a response, in order."""

    writes: list[CookieSpec] = field(default_factory=list)
    deletions: list[str] = field(default_factory=list)

    def apply(self, response: Response) -> Response:
        for spec in self.writes:
            response.set_cookie(
                spec.name,
                spec.value,
                max_age=spec.max_age,
                path=spec.path,
                secure=spec.secure,
                httponly=spec.http_only,
                samesite=spec.same_site,
            )
        for name in self.deletions:
            response.delete_cookie(name, path="/")
        return response

    def names(self) -> set[str]:
        return {spec.name for spec in self.writes} | set(self.deletions)


def read_session_tokens(cookies: dict[str, str]) -> tuple[Optional[str], Optional[str]]:
    """Return ``(access, refresh)``; an empty cookie counts as absent."""
    return cookies.get(ACCESS_TOKEN_COOKIE) or None, cookies.get(REFRESH_TOKEN_COOKIE) or None


def has_session_tokens(cookies: dict[str, str]) -> bool:
    access, refresh = read_session_tokens(cookies)
    return bool(access and refresh)


def _token_cookies(session: AuthSession, settings: Settings, refresh_max_age: int) -> list[CookieSpec]:
    access_max_age = session.expires_in or settings.DEFAULT_ACCESS_TOKEN_MAX_AGE_SECONDS
    secure = settings.cookie_secure
    return [
        CookieSpec(ACCESS_TOKEN_COOKIE, session.access_token, access_max_age, secure=secure),
        CookieSpec(REFRESH_TOKEN_COOKIE, session.refresh_token, refresh_max_age, secure=secure),
    ]


def rotated_session_cookies(session: AuthSession, settings: Settings) -> CookiePatch:
    """Cookies written after a successful refresh on a protected request.

    The refresh cookie always rolls forward a fixed window, whatever the
    store says about the token itself.
    """
    return CookiePatch(writes=_token_cookies(session, settings, settings.REFRESH_TOKEN_MAX_AGE_SECONDS))


def admin_login_cookies(
    session: AuthSession,
    settings: Settings,
    now: Optional[datetime] = None,
) -> CookiePatch:
    """Token pair plus the advisory extended-session markers."""
    now = now or datetime.now(timezone.utc)
    extended = settings.extended_session_seconds
    expiry = now + timedelta(seconds=extended)
    secure = settings.cookie_secure

    cookies = _token_cookies(session, settings, extended)
    cookies.append(
        CookieSpec(ADMIN_SESSION_COOKIE, "true", extended, http_only=False, secure=secure, same_site="lax")
    )
    cookies.append(
        CookieSpec(
            SESSION_EXPIRY_COOKIE,
            expiry.isoformat(),
            extended,
            http_only=False,
            secure=secure,
            same_site="lax",
        )
    )
    return CookiePatch(writes=cookies)


def clear_session_cookies() -> CookiePatch:
    return CookiePatch(deletions=list(SESSION_COOKIES))


def clear_all_auth_cookies() -> CookiePatch:
    return CookiePatch(deletions=list(SESSION_COOKIES + ADVISORY_COOKIES))
