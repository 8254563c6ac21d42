"""Route classification for the authorization middleware.

Patterns use the glob dialect the dashboard has always used for its route
tables:

* ``*`` matches within a single path segment, ``?`` one non-slash character
* ``**`` matches across segments; a trailing ``/**`` also matches the bare
  parent (``/api/admin/**`` matches ``/api/admin``), and ``/a/**/b``
  matches ``/a/b``
* ``(a|b)`` is an alternation; empty alternatives are allowed, which gives
  the optional trailing slash idiom ``/dashboard(|/)``

Matching is anchored to the whole path, so ``/dashboard(|/)`` does not match
``/dashboard/sub``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

PAGE_PROTECTED_ROUTES = (
    "/dashboard(|/)",
    "/orders(|/)",
    "/users(|/)",
    "/products(|/)",
    "/payments-table(|/)",
)

AUTH_PASSTHROUGH_ROUTES = (
    "/api/auth/login(|/)",
    "/api/auth/logout(|/)",
    "/api/auth/session(|/)",
)

REDIRECT_IF_AUTHED_ROUTES = ("/(|/)",)

ADMIN_API_ROUTES = (
    "/api/admin(|/)",
    "/api/admin/**",
    "/api/auth/me(|/)",
)

API_PROTECTED_ROUTES = (
    "/api/guestbook(|/)",
    "/api/guestbook/**",
    "/api/woo/get-orders(|/)",
    "/api/wp/get-orders(|/)",
    "/api/woo/get-order-details(|/)",
    "/api/wp/get-order-details(|/)",
) + ADMIN_API_ROUTES


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate one route glob into an anchored regular expression."""
    out: list[str] = []
    depth = 0
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                # "/**" may match zero segments, at the end or mid-pattern.
                if out and out[-1] == "/" and i + 2 == n:
                    out[-1] = "(?:/.*)?"
                elif out and out[-1] == "/" and pattern.startswith("/", i + 2):
                    out[-1] = "(?:/.*)?/"
                    i += 3
                    continue
                else:
                    out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "(":
            depth += 1
            out.append("(?:")
        elif c == ")" and depth:
            depth -= 1
            out.append(")")
        elif c == "|" and depth:
            out.append("|")
        else:
            out.append(re.escape(c))
        i += 1
    if depth:
        raise ValueError(f"Unbalanced parenthesis in route pattern: {pattern!r}")
    return re.compile("".join(out))


def matches(path: str, patterns: Iterable[str]) -> bool:
    return any(compile_pattern(p).fullmatch(path) for p in patterns)


@dataclass(frozen=True)
class RouteClass:
    is_auth_passthrough: bool = False
    is_protected: bool = False
    is_redirect_if_authed: bool = False
    is_admin_only: bool = False


class RouteClassifier:
    """Static route tables for one middleware variant.

    The flags are independent: a path may fall into several tables, and
    the middleware decides precedence.
    """

    def __init__(
        self,
        protected: Sequence[str] = (),
        auth_passthrough: Sequence[str] = (),
        redirect_if_authed: Sequence[str] = (),
        admin_only: Sequence[str] = (),
    ) -> None:
        self.protected = tuple(protected)
        self.auth_passthrough = tuple(auth_passthrough)
        self.redirect_if_authed = tuple(redirect_if_authed)
        self.admin_only = tuple(admin_only)
        # Fail at startup on a bad table, not on the first request.
        for pattern in self.protected + self.auth_passthrough + self.redirect_if_authed + self.admin_only:
            compile_pattern(pattern)

    def classify(self, path: str) -> RouteClass:
        return RouteClass(
            is_auth_passthrough=matches(path, self.auth_passthrough),
            is_protected=matches(path, self.protected),
            is_redirect_if_authed=matches(path, self.redirect_if_authed),
            is_admin_only=matches(path, self.admin_only),
        )


def page_classifier() -> RouteClassifier:
    return RouteClassifier(
        protected=PAGE_PROTECTED_ROUTES,
        auth_passthrough=AUTH_PASSTHROUGH_ROUTES,
        redirect_if_authed=REDIRECT_IF_AUTHED_ROUTES,
    )


def api_classifier() -> RouteClassifier:
    return RouteClassifier(
        protected=API_PROTECTED_ROUTES,
        auth_passthrough=AUTH_PASSTHROUGH_ROUTES,
        admin_only=ADMIN_API_ROUTES,
    )


def classify(path: str) -> RouteClass:
    """Classify ``path`` against the combined page and API tables."""
    return _DEFAULT.classify(path)


_DEFAULT = RouteClassifier(
    protected=PAGE_PROTECTED_ROUTES + API_PROTECTED_ROUTES,
    auth_passthrough=AUTH_PASSTHROUGH_ROUTES,
    redirect_if_authed=REDIRECT_IF_AUTHED_ROUTES,
    admin_only=ADMIN_API_ROUTES,
)
