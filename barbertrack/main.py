"""BarberTrack — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from barbertrack.auth.router import router as auth_router
from barbertrack.common.exceptions import register_exception_handlers
from barbertrack.common.rate_limit import limiter
from barbertrack.config import settings
from barbertrack.dashboard.router import router as dashboard_router
from barbertrack.database import engine
from barbertrack.logging_config import setup_logging
from barbertrack.profiles.router import router as profiles_router
from barbertrack.service_types.router import router as service_types_router
from barbertrack.transactions.router import router as transactions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("%s starting (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield
    await engine.dispose()
    logger.info("%s stopped", settings.APP_NAME)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings.LOG_LEVEL.upper(), settings.LOG_FILE)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Barbershop service tracking — transactions, roster and performance dashboard",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(service_types_router, prefix="/api/v1/service-types", tags=["service-types"])
    app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])
    app.include_router(transactions_router, prefix="/api/v1/transactions", tags=["transactions"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])

    return app


app = create_app()
