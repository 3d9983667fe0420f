"""
Survey Analytics - FastAPI Application.

Community health survey service: anonymous submission, public dashboards
and an admin surface for summaries and raw exports.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Dependency Injection, Configuration Externalization
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from .api import router as survey_router, set_dependencies
from .config import ServiceConfiguration, SurveyServiceConfig, get_config
from .domain.dashboard import DashboardService
from .domain.summary import AdminSummaryComposer
from .export import ExportService
from .infrastructure.repository import RecordStore, configure_record_store, get_record_store, reset_record_store
from .security import JWTIdentityProvider

logger = structlog.get_logger(__name__)


@dataclass
class SurveyServices:
    """Service graph wired around one record store."""
    store: RecordStore
    dashboards: DashboardService
    summary: AdminSummaryComposer
    exporter: ExportService
    identity: JWTIdentityProvider


_services: SurveyServices | None = None


def configure_logging(settings: ServiceConfiguration) -> None:
    """Configure structured logging for the survey service."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_services(config: SurveyServiceConfig, store: RecordStore) -> SurveyServices:
    """Create the domain services on top of a record store."""
    aggregation = config.aggregation
    return SurveyServices(
        store=store,
        dashboards=DashboardService(
            store,
            fetch_timeout=aggregation.fetch_timeout_seconds,
            trend_up_threshold=aggregation.trend_up_threshold,
            trend_down_threshold=aggregation.trend_down_threshold,
        ),
        summary=AdminSummaryComposer(
            store,
            fetch_timeout=aggregation.fetch_timeout_seconds,
            recent_activity_limit=aggregation.recent_activity_limit,
        ),
        exporter=ExportService(store, config.export),
        identity=JWTIdentityProvider.from_config(config.security),
    )


def install_services(services: SurveyServices | None) -> None:
    """Publish (or clear) the service graph used by the API routes."""
    global _services
    _services = services
    if services is None:
        set_dependencies(None, None, None, None, None)
        return
    set_dependencies(services.store, services.dashboards, services.summary,
                     services.exporter, services.identity)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown."""
    config = get_config()
    configure_logging(config.service)
    logger.info("survey_service_starting", service=config.service.name,
                env=config.service.env.value, remote_store=config.store.enabled)
    if config.is_production() and not config.security.jwt_secret:
        logger.warning("admin_jwt_secret_not_configured")

    configure_record_store(config.store)
    store = get_record_store()
    await store.connect()
    install_services(build_services(config, store))
    logger.info("survey_service_ready")

    yield

    logger.info("survey_service_shutdown")
    install_services(None)
    await store.disconnect()
    reset_record_store()


def create_app(config: SurveyServiceConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or get_config()
    production = config.is_production()

    app = FastAPI(
        title="Survey Analytics Service",
        description="Anonymous community health surveys with aggregate dashboards",
        version=config.service.version,
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.service.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(survey_router)

    @app.get("/", tags=["health"])
    async def root():
        """Service information endpoint."""
        return {
            "service": config.service.name,
            "version": config.service.version,
            "status": "running",
            "environment": config.service.env.value,
        }

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/ready", tags=["health"])
    async def ready():
        """Readiness probe endpoint."""
        if _services is None:
            return {"status": "not_ready", "reason": "services_not_initialized"}
        if not await _services.store.health_check():
            return {"status": "not_ready", "reason": "record_store_unavailable"}
        return {"status": "ready"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_config().service
    uvicorn.run(
        "survey_analytics.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env.value == "development",
        log_level=settings.log_level.lower(),
    )
