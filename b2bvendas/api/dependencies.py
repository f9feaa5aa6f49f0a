"""FastAPI dependencies for the authenticated user and shared services.

``SessionAuthMiddleware`` decodes the session into ``request.state.user``;
the dependencies here turn it into the typed values route handlers receive
and raise the API errors for missing sessions, roles or profiles.
"""

from typing import Annotated

from fastapi import Depends, Request

from b2bvendas.api.utils.client import client_info
from b2bvendas.core.exceptions import UnauthorizedError, ValidationError
from b2bvendas.core.security import SessionUser, UserRole
from b2bvendas.domain.auditoria.service import AuditService, ClientInfo
from b2bvendas.domain.email.service import EmailService
from b2bvendas.infrastructure.database import DatabaseSession
from b2bvendas.infrastructure.email import EmailQueue

AUTENTICACAO_NECESSARIA = "Autenticação necessária"
PERMISSAO_INSUFICIENTE = "Permissão insuficiente"
FORNECEDOR_ID_NAO_ENCONTRADO = "Fornecedor ID não encontrado"
CLIENTE_ID_NAO_ENCONTRADO = "Cliente ID não encontrado"


def get_session_user(request: Request) -> SessionUser | None:
    return getattr(request.state, "user", None)


def require_auth(
    user: Annotated[SessionUser | None, Depends(get_session_user)],
) -> SessionUser:
    if user is None:
        raise UnauthorizedError(AUTENTICACAO_NECESSARIA)
    return user


CurrentUser = Annotated[SessionUser, Depends(require_auth)]


def require_role(*roles: UserRole):  # noqa: ANN201 - dependency factory
    """Dependency allowing only ``roles`` (admins always pass)."""

    def _check(user: CurrentUser) -> SessionUser:
        if not user.has_role(*roles):
            raise UnauthorizedError(
                PERMISSAO_INSUFICIENTE,
                context={"tipo": user.tipo.value, "required": [r.value for r in roles]},
            )
        return user

    return _check


FornecedorUser = Annotated[SessionUser, Depends(require_role(UserRole.FORNECEDOR))]
ClienteUser = Annotated[SessionUser, Depends(require_role(UserRole.CLIENTE))]
AdminUser = Annotated[SessionUser, Depends(require_role(UserRole.ADMIN))]


def require_fornecedor_id(user: FornecedorUser) -> int:
    """Supplier profile of the session; the role alone is not enough."""
    if user.fornecedor_id is None:
        raise ValidationError(FORNECEDOR_ID_NAO_ENCONTRADO)
    return user.fornecedor_id


def require_cliente_id(user: ClienteUser) -> int:
    if user.cliente_id is None:
        raise ValidationError(CLIENTE_ID_NAO_ENCONTRADO)
    return user.cliente_id


FornecedorId = Annotated[int, Depends(require_fornecedor_id)]
ClienteId = Annotated[int, Depends(require_cliente_id)]


def get_email_queue(request: Request) -> EmailQueue:
    return request.app.state.email_queue


EmailQueueDep = Annotated[EmailQueue, Depends(get_email_queue)]


def get_email_service(db: DatabaseSession, queue: EmailQueueDep) -> EmailService:
    return EmailService(db, queue=queue)


EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]


def get_client_info(request: Request) -> ClientInfo:
    """Caller IP and user agent; proxy headers count in production only."""
    trust_proxy_headers = request.app.state.settings.environment == "production"
    return client_info(request, trust_proxy_headers=trust_proxy_headers)


ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]


def get_audit_service(db: DatabaseSession) -> AuditService:
    return AuditService(db)


AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
