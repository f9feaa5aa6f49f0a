"""Email sending and the admin view of email logs and the delivery queue."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query

from b2bvendas.api.dependencies import (
    AdminUser,
    EmailQueueDep,
    EmailServiceDep,
    FornecedorUser,
)
from b2bvendas.api.schemas.email import (
    CustomEmailRequest,
    EmailJobResponse,
    EmailLogFiltros,
    EmailLogResponse,
    EmailSendResponse,
    EmailStatsFiltros,
    EmailTemplateInfo,
    TemplateEmailRequest,
)
from b2bvendas.api.utils.responses import success
from b2bvendas.api.utils.validation import validate_body
from b2bvendas.core.exceptions import NotFoundError, ValidationError
from b2bvendas.domain.email.service import EmailResult
from b2bvendas.domain.email.templates import TEMPLATES
from b2bvendas.infrastructure.email import EmailJob, EmailMessage

FILTRO_OBRIGATORIO = "Informe recipient, template ou status"

router = APIRouter(prefix="/email", tags=["email"])
admin_router = APIRouter(prefix="/admin/email", tags=["admin"])


def _send_response(result: EmailResult) -> EmailSendResponse:
    return EmailSendResponse(
        success=result.success,
        email_log_id=result.email_log_id,
        job_id=result.job_id,
        external_id=result.external_id,
        error=result.error,
    )


def _job_response(job: EmailJob) -> EmailJobResponse:
    return EmailJobResponse(
        id=job.id,
        email_log_id=job.email_log_id,
        state=job.state,
        priority=job.priority,
        attempts=job.attempts,
        total_attempts=job.total_attempts,
        last_error=job.last_error,
        to=job.message.to,
        subject=job.message.subject,
        created_at=job.created_at,
        processed_at=job.processed_at,
        finished_at=job.finished_at,
    )


@router.post("/send")
async def send_email(
    body: Annotated[dict[str, Any], Body()],
    user: FornecedorUser,
    emails: EmailServiceDep,
) -> dict[str, Any]:
    """Send a templated email (``type``) or a custom one (``subject`` and body)."""
    if body.get("type") not in (None, "custom"):
        typed = validate_body(TemplateEmailRequest, body, body)
        result = await emails.send_template(
            typed.type, typed.to, typed.data, use_queue=typed.use_queue
        )
    else:
        dados = {key: value for key, value in body.items() if key != "type"}
        custom = validate_body(CustomEmailRequest, dados, body)
        message = EmailMessage(
            to=custom.to,
            subject=custom.subject,
            html=custom.html,
            text=custom.text,
            template=custom.template or "custom",
            template_data=custom.template_data,
        )
        result = await emails.send_email(message, use_queue=custom.use_queue)
    return success(_send_response(result))


@router.get("/send")
async def list_templates(user: FornecedorUser) -> dict[str, Any]:
    return success(
        {
            "templates": [
                EmailTemplateInfo(
                    name=template.name,
                    description=template.description,
                    required_fields=list(template.required),
                    priority=template.priority,
                    tags=list(template.tags),
                )
                for template in TEMPLATES.values()
            ]
        }
    )


@admin_router.get("/logs")
async def email_logs(
    filtros: Annotated[EmailLogFiltros, Query()],
    user: AdminUser,
    emails: EmailServiceDep,
) -> dict[str, Any]:
    if not (filtros.recipient or filtros.template or filtros.status):
        raise ValidationError(FILTRO_OBRIGATORIO)
    logs = await emails.find_logs(
        destinatario=filtros.recipient,
        template=filtros.template,
        status=filtros.status,
        limit=filtros.limit,
    )
    return success([EmailLogResponse.model_validate(log) for log in logs])


@admin_router.get("/stats")
async def email_stats(
    filtros: Annotated[EmailStatsFiltros, Query()],
    user: AdminUser,
    emails: EmailServiceDep,
    queue: EmailQueueDep,
) -> dict[str, Any]:
    stats = await emails.get_stats(filtros.start_date, filtros.end_date)
    return success(
        {
            "logs": {
                "total": stats.total,
                "byStatus": stats.by_status,
                "byTemplate": stats.by_template,
            },
            "queue": {**queue.stats(), "running": queue.running},
        }
    )


@admin_router.get("/jobs/{job_id}")
async def get_job(
    job_id: str, user: AdminUser, queue: EmailQueueDep
) -> dict[str, Any]:
    job = queue.get_job(job_id)
    if job is None:
        raise NotFoundError("Job não encontrado", context={"job_id": job_id})
    return success(_job_response(job))


@admin_router.post("/jobs/{job_id}/retry")
async def retry_job(
    job_id: str, user: AdminUser, emails: EmailServiceDep
) -> dict[str, Any]:
    return success(_job_response(await emails.retry_job(job_id)))


@admin_router.delete("/jobs/{job_id}")
async def remove_job(
    job_id: str, user: AdminUser, queue: EmailQueueDep
) -> dict[str, Any]:
    queue.remove_job(job_id)
    return success({"message": "Job removido"})
