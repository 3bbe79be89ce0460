"""
Route gate in front of every request.

Only checks that a signed, unexpired token is present; handlers still run
`verify_auth` against the live user row.
"""

from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.auth import clear_auth_cookie, decode_token, extract_token
from db.users import UserRole

PUBLIC_PATHS = (
    "/login",
    "/api/auth/check-email",
    "/api/auth/setup-password",
    "/api/auth/login",
    "/api/auth/logout",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
)
ADMIN_PATHS = ("/settings",)
LOGIN_PATH = "/login"
DEFAULT_LANDING_PATH = "/items"


def _matches(path: str, prefixes) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in prefixes)


def is_public(path: str) -> bool:
    return _matches(path, PUBLIC_PATHS)


def is_api(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def _login_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"{LOGIN_PATH}?{urlencode({'redirect': path})}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


class AuthGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or is_public(path):
            return await call_next(request)

        token = extract_token(request)
        payload = decode_token(token) if token else None

        if payload is None:
            if is_api(path):
                return JSONResponse({"error": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)
            response = _login_redirect(path)
            if token:
                clear_auth_cookie(response)
            return response

        if _matches(path, ADMIN_PATHS) and payload.get("role") != UserRole.ADMIN.value:
            return RedirectResponse(url=DEFAULT_LANDING_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

        return await call_next(request)
