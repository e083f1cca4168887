"""
CORS for the two browser clients: the admin panel and the public menu site.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings

# Next.js dev servers of the admin panel and the public menu
LOCAL_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]

# Headers browsers may read: correlation ID and list totals
EXPOSED_HEADERS = ["X-Request-ID", "X-Total-Count"]


def get_cors_origins() -> list[str]:
    """ALLOWED_ORIGINS (comma-separated) when set, else the local dev servers."""
    configured = [o.strip().rstrip("/") for o in settings.allowed_origins.split(",")]
    return [o for o in configured if o] or LOCAL_ORIGINS


def configure_cors(app: FastAPI) -> None:
    """
    The session cookie is sent cross-origin, so credentials are allowed and
    origins are always an explicit list, never "*".
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept"],
        expose_headers=EXPOSED_HEADERS,
        max_age=0 if settings.environment == "development" else 600,
    )
