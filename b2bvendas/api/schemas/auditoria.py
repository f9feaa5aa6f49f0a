"""Audit log query and statistics schemas."""

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, model_validator
from pydantic_core import PydanticCustomError

from b2bvendas.api.schemas.common import ApiModel, Paginacao
from b2bvendas.domain.auditoria.models import AuditAction, AuditResource, AuditSeverity


def _comma_separated(value: object) -> object:
    """Accept ``?action=A,B`` as well as repeated ``?action=A&action=B``."""
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list):
        return [
            part.strip()
            for item in value
            for part in str(item).split(",")
            if part.strip()
        ]
    return value


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class AuditLogFiltros(Paginacao):
    usuario_id: int | None = None
    action: Annotated[list[AuditAction], BeforeValidator(_comma_separated)] = Field(
        default_factory=list
    )
    resource: Annotated[
        list[AuditResource], BeforeValidator(_comma_separated)
    ] = Field(default_factory=list)
    resource_id: str | None = None
    severity: AuditSeverity | None = None
    ip: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limite: int = Field(default=50, ge=1, le=100)


class AuditStatsFiltros(ApiModel):
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _ordered(self) -> "AuditStatsFiltros":
        if _as_utc(self.end_date) < _as_utc(self.start_date):
            raise PydanticCustomError(
                "periodo_invalido", "endDate deve ser posterior a startDate"
            )
        return self


class AuditLogResponse(ApiModel):
    id: int
    usuario_id: int | None
    action: AuditAction
    resource: AuditResource
    resource_id: str | None
    ip: str | None
    user_agent: str | None
    detalhes: dict[str, Any]
    severity: AuditSeverity
    description: str | None
    created_at: datetime


class AuditTopUser(ApiModel):
    usuario_id: int
    count: int
