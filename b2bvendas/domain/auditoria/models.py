"""Audit log entries."""

from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from b2bvendas.infrastructure.database import BaseModel, Identifier, str_enum_column


class AuditAction(StrEnum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    USER_CREATED = "USER_CREATED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"


class AuditResource(StrEnum):
    USER = "USER"
    SECURITY = "SECURITY"


class AuditSeverity(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AuditLog(BaseModel):
    """One audited event; ``created_at`` is the event time.

    ``usuario_id`` carries no foreign key: entries outlive the accounts they
    mention, and admin sessions are not backed by a ``usuarios`` row.
    """

    __tablename__ = "audit_logs"

    usuario_id: Mapped[int | None] = mapped_column(Identifier, index=True)
    action: Mapped[AuditAction] = mapped_column(
        str_enum_column(AuditAction), index=True
    )
    resource: Mapped[AuditResource] = mapped_column(
        str_enum_column(AuditResource), index=True
    )
    resource_id: Mapped[str | None] = mapped_column(String(64))
    ip: Mapped[str | None] = mapped_column(String(64), index=True)
    user_agent: Mapped[str | None] = mapped_column(String(500))
    detalhes: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    severity: Mapped[AuditSeverity] = mapped_column(
        str_enum_column(AuditSeverity), default=AuditSeverity.INFO, index=True
    )
    description: Mapped[str | None] = mapped_column(Text)
