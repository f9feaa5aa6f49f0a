"""Admin view of the audit trail."""

from typing import Annotated, Any

from fastapi import APIRouter, Query

from b2bvendas.api.dependencies import AdminUser, AuditServiceDep
from b2bvendas.api.schemas.auditoria import (
    AuditLogFiltros,
    AuditLogResponse,
    AuditStatsFiltros,
    AuditTopUser,
)
from b2bvendas.api.utils.responses import paginated, success

router = APIRouter(prefix="/admin/audit", tags=["admin"])


@router.get("")
async def audit_logs(
    filtros: Annotated[AuditLogFiltros, Query()],
    user: AdminUser,
    audit: AuditServiceDep,
) -> dict[str, Any]:
    """Audit entries, newest first. ``action`` and ``resource`` take lists."""
    page = await audit.query(
        usuario_id=filtros.usuario_id,
        actions=filtros.action,
        resources=filtros.resource,
        resource_id=filtros.resource_id,
        severity=filtros.severity,
        ip=filtros.ip,
        start=filtros.start_date,
        end=filtros.end_date,
        pagina=filtros.pagina,
        limite=filtros.limite,
    )
    return paginated(page, [AuditLogResponse.model_validate(e) for e in page.items])


@router.get("/stats")
async def audit_stats(
    filtros: Annotated[AuditStatsFiltros, Query()],
    user: AdminUser,
    audit: AuditServiceDep,
) -> dict[str, Any]:
    stats = await audit.statistics(filtros.start_date, filtros.end_date)
    return success(
        {
            "total": stats.total,
            "byAction": stats.by_action,
            "byResource": stats.by_resource,
            "bySeverity": stats.by_severity,
            "topUsers": [
                AuditTopUser(usuario_id=usuario_id, count=count)
                for usuario_id, count in stats.top_users
            ],
        }
    )
