"""FastAPI application factory for the B2B Vendas API.

This module wires the application together:
- Application lifecycle (database check, email worker start and stop)
- Middleware registration in the correct order
- Exception handler registration
- Routers for every area, mounted under ``/api``
- OpenTelemetry instrumentation

Starlette runs middleware in reverse order of registration, so the last one
added is the first to see a request.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from loguru import logger

from b2bvendas.api.constants import API_PREFIX
from b2bvendas.api.middleware.error_handler import register_exception_handlers
from b2bvendas.api.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
)
from b2bvendas.api.middleware.request_context import RequestContextMiddleware
from b2bvendas.api.middleware.request_logging import RequestLoggingMiddleware
from b2bvendas.api.middleware.security_headers import SecurityHeadersMiddleware
from b2bvendas.api.middleware.session_auth import SessionAuthMiddleware
from b2bvendas.api.routes import (
    auditoria,
    auth,
    categorias,
    cliente,
    clientes,
    email,
    fornecedor,
    health,
    produtos,
)
from b2bvendas.api.utils.responses import ORJSONResponse
from b2bvendas.core.config import Settings, get_settings
from b2bvendas.core.logging import setup_logging
from b2bvendas.core.observability import instrument_app, setup_tracing
from b2bvendas.domain.auditoria.service import record_detached
from b2bvendas.domain.email.service import EmailDeliveryHandler
from b2bvendas.infrastructure.database import close_database, get_session_factory
from b2bvendas.infrastructure.database.session import check_database_connection
from b2bvendas.infrastructure.email import EmailQueue


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Raises:
        RuntimeError: If the database does not answer during startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)
    logger.info("Database connection successful")

    queue: EmailQueue = app_instance.state.email_queue
    if app_instance.state.settings.email_config.worker_enabled:
        queue.start()

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await queue.stop()
    await close_database()
    logger.info("Application shutdown complete")


def build_api_router() -> APIRouter:
    api = APIRouter(prefix=API_PREFIX)
    api.include_router(auth.router)
    api.include_router(categorias.router)
    api.include_router(produtos.router)
    api.include_router(produtos.public_router)
    api.include_router(clientes.router)
    api.include_router(fornecedor.router)
    api.include_router(cliente.router)
    api.include_router(email.router)
    api.include_router(email.admin_router)
    api.include_router(auditoria.router)
    api.include_router(health.router)
    return api


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.started_at = time.monotonic()
    application.state.email_queue = EmailQueue(
        settings.email_config, EmailDeliveryHandler(get_session_factory())
    )
    application.state.rate_limiter = FixedWindowRateLimiter(
        settings.rate_limit_config.max_requests,
        settings.rate_limit_config.window_seconds,
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    trust_proxy_headers = settings.environment == "production"

    # 5. Session authorization (needs the correlation id and request logging)
    application.add_middleware(
        SessionAuthMiddleware,
        auth_config=settings.auth_config,
        audit_recorder=record_detached,
        trust_proxy_headers=trust_proxy_headers,
    )

    # 4. Rate limiting (rejects before any session decoding or database work)
    application.add_middleware(
        RateLimitMiddleware,
        rate_limit_config=settings.rate_limit_config,
        limiter=application.state.rate_limiter,
        audit_recorder=record_detached,
        trust_proxy_headers=trust_proxy_headers,
    )

    # 3. Request logging middleware (logs requests/responses)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)

    # 2. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    # 1. Security headers middleware (adds security headers to all responses)
    application.add_middleware(
        SecurityHeadersMiddleware,
        hsts_enabled=settings.environment == "production",
    )

    application.include_router(build_api_router())

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
