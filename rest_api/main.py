"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.auth import router as auth_router
from rest_api.routers.public import health_router, menus_router
from rest_api.routers.registration import router as registration_router
from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler


# Create FastAPI application
app = FastAPI(
    title="Menu SaaS REST API",
    description="Multi-restaurant digital menu and ordering API",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middlewares run in reverse order of registration: correlation id is outermost
register_middlewares(app)
configure_cors(app)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(menus_router)
app.include_router(registration_router)

# Uploaded images (menu item photos)
app.mount(
    settings.media_url_path,
    StaticFiles(directory=settings.media_root, check_dir=False),
    name="media",
)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
