"""Route gate: redirects unauthenticated requests for protected pages to the login page.

Runs as middleware in front of every request. It verifies the session through
the same SessionCookieManager as the request handlers, so both agree on
which tokens are valid.
"""

import re
from enum import StrEnum
from urllib.parse import urlencode

import structlog
from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from dashgate.web.cookies import SessionCookieManager

logger = structlog.get_logger(__name__)

# Paths that enforce their own authorization or serve public assets
PUBLIC_PREFIXES = ("/api", "/_next", "/static", "/health", "/docs", "/redoc", "/openapi.json")
PUBLIC_FILE_RE = re.compile(r"\.[^/]+$")
REDIRECT_PARAM = "redirectTo"


class RouteAccess(StrEnum):
    PUBLIC = "public"
    LOGIN = "login"
    PROTECTED = "protected"


def _under(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str, protected_prefix: str, login_path: str) -> RouteAccess:
    """Decide whether a request path needs a valid session."""
    if any(_under(path, prefix) for prefix in PUBLIC_PREFIXES) or PUBLIC_FILE_RE.search(path):
        return RouteAccess.PUBLIC
    if _under(path, login_path):
        return RouteAccess.LOGIN
    if _under(path, protected_prefix):
        return RouteAccess.PROTECTED
    return RouteAccess.PUBLIC


def build_login_redirect(login_path: str, path: str, query: str = "") -> str:
    """Login URL carrying the originally requested path and query for the return trip."""
    target = f"{path}?{query}" if query else path
    return f"{login_path}?{urlencode({REDIRECT_PARAM: target})}"


def sanitize_redirect(value: str | None, default: str) -> str:
    """Keep only same-site absolute paths, anything else falls back to default."""
    if not value or not value.startswith("/"):
        return default
    # Browsers drop tab and newline while parsing, so "/\t/host" would become "//host"
    if any(ord(c) < 0x20 or c == "\x7f" for c in value):
        return default
    if value.startswith(("//", "/\\")):
        return default
    return value


class RouteGateMiddleware(BaseHTTPMiddleware):
    """Gate protected pages behind a valid session cookie."""

    def __init__(self, app: ASGIApp, cookies: SessionCookieManager, protected_prefix: str, login_path: str) -> None:
        super().__init__(app)
        self._cookies = cookies
        self._protected_prefix = protected_prefix
        self._login_path = login_path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if classify_path(path, self._protected_prefix, self._login_path) is not RouteAccess.PROTECTED:
            return await call_next(request)

        if self._cookies.read(request.cookies) is None:
            location = build_login_redirect(self._login_path, path, request.url.query)
            logger.debug("route_gate_redirect", path=path)
            return RedirectResponse(location, status_code=307)

        return await call_next(request)
