"""Application factory helpers to keep filmacademy/main.py lightweight."""

from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import filmacademy.models.registry  # noqa: F401  (registers every mapper)
from filmacademy.api.router import api_router
from filmacademy.core.config import settings
from filmacademy.core.database import get_db
from filmacademy.core.error_handlers import create_error_response, register_exception_handlers
from filmacademy.core.logging_config import setup_logging
from filmacademy.core.middleware.logging_middleware import LoggingMiddleware
from filmacademy.core.middleware.rate_limit import limiter

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI) -> None:
    app.add_middleware(LoggingMiddleware)

    origins = settings.allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)


def _register_routes(app: FastAPI) -> None:
    @app.get("/")
    async def root():
        return {"message": f"{settings.SITE_NAME} API"}

    # Liveness: is the process up?
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    # Readiness: can we reach the database?
    @app.get("/readyz", tags=["Health"])
    def readyz(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Readiness check failed (Database): {e}")
            return create_error_response(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                error_code="service_unavailable",
                message="Database is not reachable",
                details={"database": "disconnected"},
                path="/readyz",
            )
        return {"status": "ready", "details": {"database": "connected"}}


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling, Rate Limiting, and Middleware.
    """
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        app_name="filmacademy",
        use_json=settings.use_json_logs,
        use_colors=settings.environment.lower() != "production",
    )

    app = FastAPI(
        title=f"{settings.SITE_NAME} API",
        description="Training academy for filmmakers: courses, quizzes, certificates, discussions and AI production tools",
        version="1.0.0",
    )

    app.state.environment = settings.environment
    app.state.limiter = limiter
    if hasattr(limiter, "enabled"):
        limiter.enabled = os.getenv("APP_ENV", settings.environment).lower() != "test"

    _configure_app(app)
    _register_routes(app)
    register_exception_handlers(app)

    logger.info("Application startup complete")
    return app


__all__ = ["create_app"]
