"""Session authentication and role gating by path prefix.

The session token is read from the session cookie or an ``Authorization:
Bearer`` header and decoded on every request, public or not, so routes under
public prefixes can still see who is calling. A missing, invalid or expired
token counts as anonymous.

Non-public requests without a session, or whose role is not allowed on the
matched prefix, are stopped here: API routes get a 401 JSON error and pages
are redirected to the sign-in page with a ``callbackUrl`` pointing back.
Every denial is written to the audit trail when a recorder is configured.
"""

from collections.abc import Awaitable, Callable
from urllib.parse import urlencode

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from b2bvendas.api.constants import API_PREFIX, CALLBACK_URL_PARAM
from b2bvendas.api.middleware.error_handler import error_response
from b2bvendas.api.utils.client import client_info
from b2bvendas.core.config import AuthConfig
from b2bvendas.core.context import RequestContext
from b2bvendas.core.exceptions import ErrorCode, UnauthorizedError
from b2bvendas.core.security import SessionUser, UserRole, decode_session_token
from b2bvendas.domain.auditoria.models import AuditAction
from b2bvendas.domain.auditoria.service import AuditRecorder, security_event

BEARER_PREFIX = "bearer "


def matches_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Decode the session and enforce the configured access rules.

    Args:
        app: The ASGI application.
        auth_config: Cookie name, public paths and role prefixes.
        audit_recorder: Persists an audit entry for every denied request.
        trust_proxy_headers: Take the audited client IP from ``X-Forwarded-For``.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        auth_config: AuthConfig,
        audit_recorder: AuditRecorder | None = None,
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self.auth_config = auth_config
        self.audit_recorder = audit_recorder
        self.trust_proxy_headers = trust_proxy_headers
        self.public_paths = set(auth_config.public_paths)
        # Longest prefix wins when prefixes overlap
        self.role_prefixes = sorted(
            (
                (prefix, frozenset(UserRole(role) for role in roles))
                for prefix, roles in auth_config.role_prefixes.items()
            ),
            key=lambda item: len(item[0]),
            reverse=True,
        )

    def is_public(self, path: str) -> bool:
        if path in self.public_paths:
            return True
        return any(
            matches_prefix(path, prefix) for prefix in self.auth_config.public_prefixes
        )

    def allowed_roles(self, path: str) -> frozenset[UserRole] | None:
        """Roles allowed on ``path``, or None when no role prefix applies."""
        for prefix, roles in self.role_prefixes:
            if matches_prefix(path, prefix):
                return roles
        return None

    def read_token(self, request: Request) -> str | None:
        if token := request.cookies.get(self.auth_config.cookie_name):
            return token
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith(BEARER_PREFIX):
            return authorization[len(BEARER_PREFIX) :].strip() or None
        return None

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        path = request.url.path
        user = decode_session_token(self.read_token(request))
        request.state.user = user
        request.state.user_id = user.id if user else None
        RequestContext.set_user_id(request.state.user_id)

        if not self.is_public(path):
            if user is None:
                return await self._deny(request, reason="no_session")
            roles = self.allowed_roles(path)
            if roles is not None and not user.has_role(*roles):
                return await self._deny(request, reason="role_not_allowed", user=user)

        return await call_next(request)

    async def _deny(
        self, request: Request, *, reason: str, user: SessionUser | None = None
    ) -> Response:
        path = request.url.path
        logger.warning(
            "Unauthorized access to {}",
            path,
            reason=reason,
            user_id=user.id if user else None,
            tipo=user.tipo.value if user else None,
        )
        if self.audit_recorder is not None:
            client = client_info(request, trust_proxy_headers=self.trust_proxy_headers)
            await self.audit_recorder(
                security_event(
                    AuditAction.UNAUTHORIZED_ACCESS,
                    client,
                    path=path,
                    method=request.method,
                    usuario_id=user.id if user else None,
                    reason=reason,
                )
            )
        if matches_prefix(path, API_PREFIX):
            error = UnauthorizedError()
            return error_response(
                error.status_code, error.message, ErrorCode.UNAUTHORIZED
            )

        query = urlencode({CALLBACK_URL_PARAM: path})
        return RedirectResponse(
            f"{self.auth_config.sign_in_path}?{query}", status_code=307
        )
