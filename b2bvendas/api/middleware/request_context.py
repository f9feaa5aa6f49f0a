"""Correlation id handling for every request.

The id comes from the ``X-Correlation-ID`` header when the caller sends one
and is generated otherwise. It is stored in ``RequestContext``, bound to every
Loguru record emitted while the request runs, and echoed in the response.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from b2bvendas.api.constants import CORRELATION_ID_HEADER
from b2bvendas.core.context import RequestContext, generate_correlation_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Set up the request scoped correlation id."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        try:
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.clear()
