"""Email sending, log and queue schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from b2bvendas.api.schemas.common import ApiModel, Email
from b2bvendas.domain.email.models import EmailStatus
from b2bvendas.infrastructure.email import JobState

type TemplateName = Literal[
    "welcome",
    "order-confirmation",
    "order-status-update",
    "order-shipped",
    "order-delivered",
    "password-reset",
    "low-stock-alert",
]


class CustomEmailRequest(ApiModel):
    to: Email
    subject: str = Field(min_length=1, max_length=255)
    html: str | None = None
    text: str | None = None
    template: str | None = None
    template_data: dict[str, Any] = Field(default_factory=dict)
    use_queue: bool = True

    @model_validator(mode="after")
    def _require_body(self) -> "CustomEmailRequest":
        if not self.html and not self.text:
            raise PydanticCustomError(
                "corpo_ausente", "Informe o conteúdo html ou text do email"
            )
        return self


class TemplateEmailRequest(ApiModel):
    type: TemplateName
    to: Email
    data: dict[str, Any] = Field(default_factory=dict)
    use_queue: bool = True


class EmailLogFiltros(ApiModel):
    recipient: str | None = None
    template: str | None = None
    status: EmailStatus | None = None
    limit: int = Field(default=50, ge=1, le=500)


class EmailStatsFiltros(ApiModel):
    start_date: datetime | None = None
    end_date: datetime | None = None


class EmailSendResponse(ApiModel):
    success: bool
    email_log_id: int
    job_id: str | None = None
    external_id: str | None = None
    error: str | None = None


class EmailTemplateInfo(ApiModel):
    name: str
    description: str
    required_fields: list[str]
    priority: int
    tags: list[str]


class EmailLogResponse(ApiModel):
    id: int
    destinatario: str
    remetente: str
    assunto: str
    template: str
    status: EmailStatus
    tags: list[str]
    job_id: str | None
    external_id: str | None
    error_message: str | None
    attempts: int
    last_attempt_at: datetime | None
    sent_at: datetime | None
    created_at: datetime


class EmailJobResponse(ApiModel):
    id: str
    email_log_id: int
    state: JobState
    priority: int
    attempts: int
    total_attempts: int
    last_error: str | None
    to: str
    subject: str
    created_at: datetime
    processed_at: datetime | None
    finished_at: datetime | None
