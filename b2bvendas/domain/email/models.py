"""Record of every outbound email."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from b2bvendas.infrastructure.database import BaseModel, str_enum_column


class EmailStatus(StrEnum):
    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"


class EmailLog(BaseModel):
    __tablename__ = "email_logs"

    destinatario: Mapped[str] = mapped_column(String(255), index=True)
    remetente: Mapped[str] = mapped_column(String(255))
    assunto: Mapped[str] = mapped_column(String(255))
    template: Mapped[str] = mapped_column(String(50), default="custom", index=True)
    status: Mapped[EmailStatus] = mapped_column(
        str_enum_column(EmailStatus), default=EmailStatus.QUEUED, index=True
    )
    template_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    job_id: Mapped[str | None] = mapped_column(String(64), index=True)
    external_id: Mapped[str | None] = mapped_column(String(255))
    error_message: Mapped[str | None] = mapped_column(Text)
    attempts: Mapped[int] = mapped_column(default=0, server_default="0")
    last_attempt_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
