"""Per client IP request limiting with fixed windows.

Each client IP gets ``max_requests`` requests per ``window_seconds``; the
window starts with the client's first request and the counter resets once it
has elapsed. Requests over the limit get a 429 error envelope with the
``X-RateLimit-*`` and ``Retry-After`` headers, and the first rejection in a
window is written to the audit trail.

Counters live in process memory, so each worker process limits on its own.
"""

import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from b2bvendas.api.constants import (
    RATE_LIMIT_LIMIT_HEADER,
    RATE_LIMIT_REMAINING_HEADER,
    RATE_LIMIT_RESET_HEADER,
)
from b2bvendas.api.middleware.error_handler import error_response
from b2bvendas.api.middleware.session_auth import matches_prefix
from b2bvendas.api.utils.client import client_info
from b2bvendas.core.config import RateLimitConfig
from b2bvendas.core.exceptions import RateLimitExceededError
from b2bvendas.domain.auditoria.models import AuditAction
from b2bvendas.domain.auditoria.service import AuditRecorder, security_event

MAX_TRACKED_CLIENTS = 10_000


@dataclass(slots=True)
class _Window:
    reset_at: float
    count: int = 0


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    first_rejection: bool = False


class FixedWindowRateLimiter:
    """Request counters keyed by client.

    Args:
        max_requests: Requests allowed per key in one window.
        window_seconds: Window length.
        clock: Returns the current time as epoch seconds.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and say whether it may proceed."""
        now = self.clock()
        window = self._windows.get(key)
        if window is None or window.reset_at <= now:
            if len(self._windows) >= MAX_TRACKED_CLIENTS:
                self._purge(now)
            window = _Window(reset_at=now + self.window_seconds)
            self._windows[key] = window

        window.count += 1
        return RateLimitResult(
            allowed=window.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_at=window.reset_at,
            first_rejection=window.count == self.max_requests + 1,
        )

    def reset(self, key: str | None = None) -> None:
        """Forget one key's counter, or every counter."""
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def _purge(self, now: float) -> None:
        expired = [key for key, w in self._windows.items() if w.reset_at <= now]
        for key in expired:
            del self._windows[key]
        logger.debug("Purged {} expired rate limit windows", len(expired))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests from client IPs over their request budget.

    Args:
        app: The ASGI application.
        rate_limit_config: Limits, trusted IPs and excluded prefixes.
        limiter: Counter store; one is built from the config when omitted.
        audit_recorder: Persists the audit entry of a rejected client.
        trust_proxy_headers: Take the client IP from ``X-Forwarded-For``.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        rate_limit_config: RateLimitConfig,
        limiter: FixedWindowRateLimiter | None = None,
        audit_recorder: AuditRecorder | None = None,
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self.config = rate_limit_config
        self.limiter = limiter or FixedWindowRateLimiter(
            rate_limit_config.max_requests, rate_limit_config.window_seconds
        )
        self.audit_recorder = audit_recorder
        self.trust_proxy_headers = trust_proxy_headers
        self.trusted_ips = frozenset(rate_limit_config.trusted_ips)

    def is_excluded(self, path: str) -> bool:
        return any(
            matches_prefix(path, prefix) for prefix in self.config.excluded_prefixes
        )

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self.config.enabled or self.is_excluded(request.url.path):
            return await call_next(request)

        client = client_info(request, trust_proxy_headers=self.trust_proxy_headers)
        if client.ip in self.trusted_ips:
            return await call_next(request)

        result = self.limiter.hit(client.ip)
        if result.allowed:
            return await call_next(request)

        logger.warning(
            "Rate limit exceeded for {}",
            client.ip,
            path=request.url.path,
            limit=result.limit,
        )
        if result.first_rejection and self.audit_recorder is not None:
            await self.audit_recorder(
                security_event(
                    AuditAction.RATE_LIMIT_EXCEEDED,
                    client,
                    path=request.url.path,
                    method=request.method,
                )
            )
        return self._too_many_requests(result)

    def _too_many_requests(self, result: RateLimitResult) -> Response:
        error = RateLimitExceededError()
        response = error_response(error.status_code, error.message, error.error_code)
        retry_after = max(1, math.ceil(result.reset_at - self.limiter.clock()))
        response.headers[RATE_LIMIT_LIMIT_HEADER] = str(result.limit)
        response.headers[RATE_LIMIT_REMAINING_HEADER] = "0"
        response.headers[RATE_LIMIT_RESET_HEADER] = datetime.fromtimestamp(
            result.reset_at, UTC
        ).isoformat()
        response.headers["Retry-After"] = str(retry_after)
        return response
