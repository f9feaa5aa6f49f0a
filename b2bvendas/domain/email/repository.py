"""Email log persistence and delivery statistics."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from b2bvendas.domain.email.models import EmailLog, EmailStatus
from b2bvendas.infrastructure.database import BaseRepository


@dataclass(frozen=True, slots=True)
class EmailStats:
    total: int
    by_status: dict[str, int]
    by_template: dict[str, int]


class EmailLogRepository(BaseRepository[EmailLog]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EmailLog)

    async def find_logs(
        self,
        *,
        destinatario: str | None = None,
        template: str | None = None,
        status: EmailStatus | None = None,
        limit: int = 50,
    ) -> list[EmailLog]:
        """Most recent logs matching every given filter."""
        stmt = select(EmailLog)
        if destinatario:
            stmt = stmt.where(EmailLog.destinatario == destinatario)
        if template:
            stmt = stmt.where(EmailLog.template == template)
        if status is not None:
            stmt = stmt.where(EmailLog.status == status)
        stmt = stmt.order_by(EmailLog.created_at.desc(), EmailLog.id.desc())
        stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_stats(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> EmailStats:
        conditions: list[ColumnElement[bool]] = []
        if start is not None:
            conditions.append(EmailLog.created_at >= start)
        if end is not None:
            conditions.append(EmailLog.created_at <= end)

        total = await self.count(*conditions)
        by_status = await self._group_count(EmailLog.status, conditions)
        by_template = await self._group_count(EmailLog.template, conditions)
        return EmailStats(
            total=total,
            by_status={str(key): value for key, value in by_status.items()},
            by_template={str(key): value for key, value in by_template.items()},
        )

    async def _group_count(
        self, column: ColumnElement[object], conditions: list[ColumnElement[bool]]
    ) -> dict[object, int]:
        stmt = (
            select(column, func.count(EmailLog.id))
            .where(*conditions)
            .group_by(column)
        )
        result = await self.session.execute(stmt)
        return {key: count for key, count in result.all()}
