"""
Security middlewares: response headers and request body content types.
"""

import re

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.settings import settings

# Sent on every response
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

# JSON API only: nothing but images (menu item photos, QR codes) is rendered
API_CSP = "; ".join([
    "default-src 'none'",
    "img-src 'self' data: https:",
    "frame-ancestors 'none'",
    "base-uri 'none'",
    "form-action 'none'",
])

# Session and password responses must never be cached
NO_STORE_PREFIXES = ("/api/auth/",)

JSON_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")

# Uploads are the only multipart endpoints
MULTIPART_PATHS = (re.compile(r"^/api/menu-items/\d+/image$"),)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to every response.

    Auth responses get Cache-Control: no-store, HSTS is sent in production
    only and the Server header is removed.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        response.headers["Content-Security-Policy"] = API_CSP

        if request.url.path.startswith(NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        if "server" in response.headers:
            del response.headers["server"]
        return response


def is_multipart_path(path: str) -> bool:
    return any(pattern.match(path) for pattern in MULTIPART_PATHS)


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    Reject request bodies in formats the API does not read (415).

    JSON (or form-urlencoded) everywhere; multipart/form-data only on the
    upload endpoints. Bodyless requests (logout) carry no content type and
    pass through.
    """

    METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}

    async def dispatch(self, request: Request, call_next):
        content_type = request.headers.get("content-type", "")
        if request.method in self.METHODS_WITH_BODY and content_type:
            allowed = JSON_CONTENT_TYPES
            if is_multipart_path(request.url.path):
                allowed = ("multipart/form-data",)
            if not content_type.startswith(allowed):
                return JSONResponse(
                    status_code=415,
                    content={"detail": f"Unsupported Media Type. Use {allowed[0]}"},
                )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    """
    Register the security middlewares.

    Middlewares run in reverse order of registration: content types are
    checked first, headers are added last.
    """
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ContentTypeValidationMiddleware)
