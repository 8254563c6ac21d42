"""Placeholder page handlers.

The real dashboard screens live in the front end; these handlers only
render a shell so that the page middleware has something to guard, and show
which admin the request was authenticated as.
"""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

DASHBOARD_PAGES = {
    "/dashboard": "Dashboard",
    "/orders": "Orders",
    "/users": "Users",
    "/products": "Products",
    "/payments-table": "Payments",
}


def _shell(title: str, body: str) -> str:
    return (
        "<!doctype html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head><body>{body}</body></html>"
    )


@router.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    return HTMLResponse(_shell("Sign in", "<h1>Sign in</h1><div id=\"login-form\"></div>"))


def _make_page(title: str):
    async def page(request: Request) -> HTMLResponse:
        email = getattr(request.state, "email", None) or ""
        body = f"<h1>{escape(title)}</h1><p class=\"user\">{escape(email)}</p>"
        return HTMLResponse(_shell(title, body))

    page.__name__ = f"page_{title.lower()}"
    return page


for _path, _title in DASHBOARD_PAGES.items():
    router.add_api_route(_path, _make_page(_title), methods=["GET"], response_class=HTMLResponse)
    router.add_api_route(
        f"{_path}/", _make_page(_title), methods=["GET"], response_class=HTMLResponse, include_in_schema=False
    )
