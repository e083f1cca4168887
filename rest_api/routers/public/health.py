"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal, engine
from shared.utils.health import (
    HealthStatus,
    aggregate_health_results,
    sync_health_check_with_timeout,
)


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@sync_health_check_with_timeout(timeout=3.0, component="database")
def check_database_health() -> dict:
    """Check database connectivity."""
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
    return {"dialect": engine.dialect.name}


@router.get("/health/detailed")
def detailed_health_check():
    """
    Detailed health check that verifies connectivity to the database.

    Returns 503 Service Unavailable if the database is down.
    """
    health_results = aggregate_health_results([check_database_health()])

    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "status": health_results["status"],
        "dependencies": health_results["components"],
    }

    if checks["status"] != HealthStatus.HEALTHY.value:
        return JSONResponse(content=checks, status_code=503)

    return checks
