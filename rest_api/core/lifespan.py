"""
Startup and shutdown for the REST API.

Startup order: logging, configuration check, schema, media directory,
stale session cleanup, seed data. Each step is a plain function so the
CLI and tests can run them on their own.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from rest_api.models import Base
from rest_api.seed import seed
from rest_api.services.domain.auth_service import purge_stale_sessions
from shared.config.logging import rest_api_logger as logger, setup_logging
from shared.config.settings import settings
from shared.infrastructure.db import engine, get_db_context


def check_configuration() -> None:
    """
    Refuse to start in production with insecure settings.

    Raises:
        RuntimeError: Production environment with configuration errors.
    """
    problems = settings.validate_production_secrets()
    for problem in problems:
        logger.error("Configuration error", problem=problem)

    if problems and settings.environment == "production":
        raise RuntimeError("Refusing to start in production: " + "; ".join(problems))
    if problems:
        logger.warning("Insecure defaults in use", environment=settings.environment)


def prepare_media_root() -> Path:
    root = Path(settings.media_root)
    root.mkdir(parents=True, exist_ok=True)
    return root


def prepare_database() -> None:
    """Create missing tables, drop dead sessions and seed plans/root admin."""
    Base.metadata.create_all(bind=engine)

    with get_db_context() as db:
        purged = purge_stale_sessions(db)
        db.commit()
        seed(db, demo=settings.environment == "development")

    logger.info("Database ready", stale_sessions_purged=purged)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_configuration()
    prepare_media_root()
    prepare_database()
    logger.info("REST API started", port=settings.rest_api_port, environment=settings.environment)

    yield

    engine.dispose()
    logger.info("REST API stopped")
