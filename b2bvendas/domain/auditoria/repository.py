"""Audit log queries and activity statistics."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.auditoria.models import (
    AuditAction,
    AuditLog,
    AuditResource,
    AuditSeverity,
)
from b2bvendas.infrastructure.database import BaseRepository, Page

TOP_USERS_LIMIT = 10


@dataclass(frozen=True, slots=True)
class AuditStats:
    total: int
    by_action: dict[str, int]
    by_resource: dict[str, int]
    by_severity: dict[str, int]
    top_users: list[tuple[int, int]]


class AuditLogRepository(BaseRepository[AuditLog]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditLog)

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
        """Newest entries first, matching every given filter."""
        stmt = select(AuditLog)
        if usuario_id is not None:
            stmt = stmt.where(AuditLog.usuario_id == usuario_id)
        if actions:
            stmt = stmt.where(AuditLog.action.in_(actions))
        if resources:
            stmt = stmt.where(AuditLog.resource.in_(resources))
        if resource_id:
            stmt = stmt.where(AuditLog.resource_id == resource_id)
        if severity is not None:
            stmt = stmt.where(AuditLog.severity == severity)
        if ip:
            stmt = stmt.where(AuditLog.ip == ip)
        stmt = stmt.where(*_period(start, end))
        stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        return await self.paginate(stmt, pagina, limite)

    async def statistics(self, start: datetime, end: datetime) -> AuditStats:
        conditions = _period(start, end)
        total = await self.count(*conditions)

        top_stmt = (
            select(AuditLog.usuario_id, func.count(AuditLog.id).label("total"))
            .where(*conditions, AuditLog.usuario_id.is_not(None))
            .group_by(AuditLog.usuario_id)
            .order_by(func.count(AuditLog.id).desc(), AuditLog.usuario_id)
            .limit(TOP_USERS_LIMIT)
        )
        top_users = (await self.session.execute(top_stmt)).all()

        return AuditStats(
            total=total,
            by_action=await self._group_count(AuditLog.action, conditions),
            by_resource=await self._group_count(AuditLog.resource, conditions),
            by_severity=await self._group_count(AuditLog.severity, conditions),
            top_users=[(usuario_id, count) for usuario_id, count in top_users],
        )

    async def _group_count(
        self, column: ColumnElement[object], conditions: list[ColumnElement[bool]]
    ) -> dict[str, int]:
        stmt = (
            select(column, func.count(AuditLog.id))
            .where(*conditions)
            .group_by(column)
        )
        result = await self.session.execute(stmt)
        return {str(key): count for key, count in result.all()}


def _period(start: datetime | None, end: datetime | None) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if start is not None:
        conditions.append(AuditLog.created_at >= start)
    if end is not None:
        conditions.append(AuditLog.created_at <= end)
    return conditions
