"""Recording and querying the audit trail.

Audit writes are best-effort: a failed insert is logged and never breaks the
operation being audited. ``AuditService`` writes inside the caller's session
under a savepoint. Middleware, which runs before any request session exists,
uses ``record_detached`` instead, which commits in a session of its own.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.auditoria.models import (
    AuditAction,
    AuditLog,
    AuditResource,
    AuditSeverity,
)
from b2bvendas.domain.auditoria.repository import AuditLogRepository, AuditStats
from b2bvendas.infrastructure.database import Page, get_async_session

UNKNOWN = "unknown"

type AuditRecorder = Callable[[AuditLog], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class ClientInfo:
    ip: str = UNKNOWN
    user_agent: str = UNKNOWN


def auth_event(
    action: AuditAction,
    usuario_id: int | None,
    client: ClientInfo,
    detalhes: Mapping[str, Any] | None = None,
) -> AuditLog:
    severity = (
        AuditSeverity.WARNING
        if action == AuditAction.LOGIN_FAILED
        else AuditSeverity.INFO
    )
    return AuditLog(
        usuario_id=usuario_id,
        action=action,
        resource=AuditResource.USER,
        ip=client.ip,
        user_agent=client.user_agent,
        detalhes=dict(detalhes or {}),
        severity=severity,
    )


def user_event(action: AuditAction, usuario_id: int, client: ClientInfo) -> AuditLog:
    """Entry for a change a user made to their own account."""
    return AuditLog(
        usuario_id=usuario_id,
        action=action,
        resource=AuditResource.USER,
        resource_id=str(usuario_id),
        ip=client.ip,
        user_agent=client.user_agent,
        detalhes={},
        severity=AuditSeverity.INFO,
    )


def security_event(
    action: AuditAction,
    client: ClientInfo,
    *,
    path: str,
    method: str,
    usuario_id: int | None = None,
    severity: AuditSeverity = AuditSeverity.WARNING,
    **detalhes: Any,
) -> AuditLog:
    return AuditLog(
        usuario_id=usuario_id,
        action=action,
        resource=AuditResource.SECURITY,
        ip=client.ip,
        user_agent=client.user_agent,
        detalhes={**detalhes, "path": path, "method": method},
        severity=severity,
    )


def _log_serious(entry: AuditLog) -> None:
    if entry.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
        logger.warning(
            "Audit event {}",
            entry.action.value,
            resource=entry.resource.value,
            usuario_id=entry.usuario_id,
            ip=entry.ip,
        )


async def record_detached(entry: AuditLog) -> None:
    """Persist ``entry`` in its own committed session."""
    try:
        async with get_async_session() as session:
            session.add(entry)
    except (SQLAlchemyError, OSError):
        logger.exception("Failed to create audit log", action=entry.action.value)
        return
    _log_serious(entry)


class AuditService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.logs = AuditLogRepository(session)

    async def record(self, entry: AuditLog) -> None:
        """Add ``entry`` under a savepoint; a failed insert only rolls that back."""
        try:
            async with self.session.begin_nested():
                self.session.add(entry)
        except SQLAlchemyError:
            logger.exception("Failed to create audit log", action=entry.action.value)
            return
        _log_serious(entry)

    async def log_auth_event(
        self,
        action: AuditAction,
        usuario_id: int | None,
        client: ClientInfo,
        detalhes: Mapping[str, Any] | None = None,
    ) -> None:
        await self.record(auth_event(action, usuario_id, client, detalhes))

    async def log_user_created(self, usuario_id: int, client: ClientInfo) -> None:
        await self.record(user_event(AuditAction.USER_CREATED, usuario_id, client))

    async def log_password_changed(self, usuario_id: int, client: ClientInfo) -> None:
        await self.record(user_event(AuditAction.PASSWORD_CHANGED, usuario_id, client))

    async def query(
        self,
        *,
        usuario_id: int | None = None,
        actions: Sequence[AuditAction] = (),
        resources: Sequence[AuditResource] = (),
        resource_id: str | None = None,
        severity: AuditSeverity | None = None,
        ip: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        pagina: int = 1,
        limite: int = 50,
    ) -> Page[AuditLog]:
        return await self.logs.query(
            usuario_id=usuario_id,
            actions=actions,
            resources=resources,
            resource_id=resource_id,
            severity=severity,
            ip=ip,
            start=start,
            end=end,
            pagina=pagina,
            limite=limite,
        )

    async def statistics(self, start: datetime, end: datetime) -> AuditStats:
        return await self.logs.statistics(start, end)
