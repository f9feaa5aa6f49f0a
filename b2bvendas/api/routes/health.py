"""Health check used by load balancers and container orchestration."""

import time
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from loguru import logger

from b2bvendas.api.dependencies import EmailQueueDep
from b2bvendas.api.utils.responses import ORJSONResponse
from b2bvendas.core.config import Settings, get_settings
from b2bvendas.infrastructure.database.session import check_database_connection

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    request: Request,
    queue: EmailQueueDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ORJSONResponse:
    """Report database and email queue health.

    ``unhealthy`` (HTTP 503) when the database does not answer, ``degraded``
    when the email worker should be running but is not.
    """
    started = time.perf_counter()
    database_ok, error_msg = await check_database_connection()
    response_time = round((time.perf_counter() - started) * 1000, 2)

    if not database_ok:
        logger.warning("Database health check failed: {}", error_msg)

    worker_down = settings.email_config.worker_enabled and not queue.running
    if not database_ok:
        health_status = "unhealthy"
    elif worker_down:
        health_status = "degraded"
    else:
        health_status = "healthy"

    database_check: dict[str, Any] = {
        "status": "up" if database_ok else "down",
        "responseTime": response_time,
    }
    if error_msg:
        database_check["error"] = error_msg

    body = {
        "status": health_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.app_version,
        "uptime": round(time.monotonic() - request.app.state.started_at, 2),
        "checks": {
            "database": database_check,
            "emailQueue": {**queue.stats(), "running": queue.running},
        },
    }
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if health_status == "unhealthy"
        else status.HTTP_200_OK
    )
    return ORJSONResponse(body, status_code=status_code)
