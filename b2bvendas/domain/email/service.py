"""Sending transactional email and keeping the ``EmailLog`` in step.

``EmailService`` runs inside a request: it writes the log row and either hands
the message to the queue or sends it right away. ``EmailDeliveryHandler`` runs
inside the queue worker and records each attempt with its own session.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from b2bvendas.core.config import Settings, get_settings
from b2bvendas.domain.email.models import EmailLog, EmailStatus
from b2bvendas.domain.email.repository import EmailLogRepository, EmailStats
from b2bvendas.domain.email.templates import get_template
from b2bvendas.domain.pedidos.models import Pedido, StatusPedido
from b2bvendas.infrastructure.email import (
    EmailDeliveryError,
    EmailJob,
    EmailMessage,
    EmailQueue,
    EmailTransport,
    JobState,
    LoggingTransport,
)

STATUS_LABELS: dict[StatusPedido, str] = {
    StatusPedido.PENDENTE: "Pendente",
    StatusPedido.CONFIRMADO: "Confirmado",
    StatusPedido.ENVIADO: "Enviado",
    StatusPedido.ENTREGUE: "Entregue",
    StatusPedido.CANCELADO: "Cancelado",
}


@dataclass(frozen=True, slots=True)
class EmailResult:
    success: bool
    email_log_id: int
    job_id: str | None = None
    external_id: str | None = None
    error: str | None = None


class EmailService:
    def __init__(
        self,
        session: AsyncSession,
        queue: EmailQueue | None = None,
        transport: EmailTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.session = session
        self.queue = queue
        self.transport = transport or LoggingTransport()
        self.settings = settings or get_settings()
        self.logs = EmailLogRepository(session)

    async def send_email(
        self, message: EmailMessage, *, use_queue: bool = True
    ) -> EmailResult:
        """Log ``message`` and deliver it through the queue or directly.

        Queued messages are committed before the job is added so the worker,
        which uses its own session, always finds the log row.
        """
        remetente = message.from_address or self.settings.email_config.from_address
        log = await self.logs.create(
            EmailLog(
                destinatario=message.to,
                remetente=remetente,
                assunto=message.subject,
                template=message.template,
                template_data=dict(message.template_data),
                tags=list(message.tags),
                status=EmailStatus.QUEUED,
            )
        )

        if use_queue and self.queue is not None:
            await self.session.commit()
            job = self.queue.add(log.id, message)
            await self.logs.update(log, {"job_id": job.id})
            return EmailResult(success=True, email_log_id=log.id, job_id=job.id)

        now = datetime.now(UTC)
        try:
            external_id = await self.transport.send(message)
        except EmailDeliveryError as e:
            logger.warning("Direct email delivery failed: {}", e.message, to=message.to)
            await self.logs.update(
                log,
                {
                    "status": EmailStatus.FAILED,
                    "error_message": e.message,
                    "attempts": 1,
                    "last_attempt_at": now,
                },
            )
            return EmailResult(success=False, email_log_id=log.id, error=e.message)

        await self.logs.update(
            log,
            {
                "status": EmailStatus.SENT,
                "external_id": external_id,
                "attempts": 1,
                "last_attempt_at": now,
                "sent_at": now,
            },
        )
        return EmailResult(success=True, email_log_id=log.id, external_id=external_id)

    async def send_template(
        self,
        template_name: str,
        to: str,
        data: Mapping[str, Any],
        *,
        use_queue: bool = True,
    ) -> EmailResult:
        template = get_template(template_name)
        subject, html, text = template.render(data)
        message = EmailMessage(
            to=to,
            subject=subject,
            html=html,
            text=text,
            template=template.name,
            template_data=dict(data),
            tags=list(template.tags),
            priority=template.priority,
        )
        return await self.send_email(message, use_queue=use_queue)

    async def send_welcome(
        self, email: str, nome: str, empresa: str | None = None
    ) -> EmailResult:
        return await self.send_template(
            "welcome",
            email,
            {"userName": nome, "userEmail": email, "companyName": empresa},
        )

    async def send_order_confirmation(self, pedido: Pedido) -> EmailResult | None:
        """Notify the customer of a new order.

        ``pedido`` must have ``itens`` (with products) and ``cliente`` loaded.
        """
        if not pedido.cliente.email:
            return None
        data = {
            **_order_data(pedido),
            "items": [
                {
                    "name": item.produto.nome,
                    "quantity": item.quantidade,
                    "price": float(item.preco_unitario),
                    "total": float(item.subtotal),
                }
                for item in pedido.itens
            ],
            "subtotal": float(pedido.subtotal),
            "discount": float(pedido.desconto),
            "shipping": float(pedido.frete),
            "total": float(pedido.total),
            "orderDate": pedido.created_at.strftime("%d/%m/%Y"),
        }
        return await self.send_template(
            "order-confirmation", pedido.cliente.email, data
        )

    async def send_order_status(
        self, pedido: Pedido, previous: StatusPedido
    ) -> EmailResult | None:
        """Pick the shipped, delivered or generic update notification."""
        if not pedido.cliente.email:
            return None
        data = _order_data(pedido)
        if pedido.status == StatusPedido.ENVIADO:
            template = "order-shipped"
        elif pedido.status == StatusPedido.ENTREGUE:
            template = "order-delivered"
        else:
            template = "order-status-update"
            data |= {
                "oldStatus": STATUS_LABELS[previous],
                "newStatus": STATUS_LABELS[pedido.status],
            }
        return await self.send_template(template, pedido.cliente.email, data)

    async def retry_job(self, job_id: str) -> EmailJob:
        """Re-enqueue a failed job and put its log back in the queued state.

        The log is committed before the job is pushed so the worker never
        sees a stale ``failed`` row.
        """
        if self.queue is None:
            msg = "EmailService has no queue"
            raise RuntimeError(msg)
        job = self.queue.get_job(job_id)
        if job is not None and job.state == JobState.FAILED:
            log = await self.logs.get_by_id(job.email_log_id)
            if log is not None:
                await self.logs.update(
                    log, {"status": EmailStatus.QUEUED, "error_message": None}
                )
                await self.session.commit()
        return self.queue.retry_job(job_id)

    async def find_logs(
        self,
        *,
        destinatario: str | None = None,
        template: str | None = None,
        status: EmailStatus | None = None,
        limit: int = 50,
    ) -> list[EmailLog]:
        return await self.logs.find_logs(
            destinatario=destinatario, template=template, status=status, limit=limit
        )

    async def get_stats(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> EmailStats:
        return await self.logs.get_stats(start, end)


def _order_data(pedido: Pedido) -> dict[str, Any]:
    return {
        "orderNumber": pedido.numero,
        "customerName": pedido.cliente.nome_fantasia or pedido.cliente.razao_social,
    }


class EmailDeliveryHandler:
    """Queue job handler: sends through the transport and updates the log."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        transport: EmailTransport | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.transport = transport or LoggingTransport()

    async def deliver(self, job: EmailJob) -> None:
        """Send the message, then mark the log sent.

        A failed log write after a successful send is logged and swallowed so
        the queue does not send the message a second time.
        """
        external_id = await self.transport.send(job.message)
        now = datetime.now(UTC)
        try:
            await self._update_log(
                job,
                status=EmailStatus.SENT,
                external_id=external_id,
                error_message=None,
                attempts=job.total_attempts,
                last_attempt_at=now,
                sent_at=now,
            )
        except Exception:  # noqa: BLE001 - the message already left
            logger.exception(
                "Email sent but log {} was not updated",
                job.email_log_id,
                job_id=job.id,
                external_id=external_id,
            )

    async def record_failure(
        self, job: EmailJob, error: Exception, *, final: bool
    ) -> None:
        changes: dict[str, Any] = {
            "error_message": str(error),
            "attempts": job.total_attempts,
            "last_attempt_at": datetime.now(UTC),
        }
        if final:
            changes["status"] = EmailStatus.FAILED
        await self._update_log(job, **changes)

    async def _update_log(self, job: EmailJob, **changes: Any) -> None:
        async with self.session_factory() as session:
            log = await session.get(EmailLog, job.email_log_id)
            if log is None:
                logger.warning(
                    "Email log {} not found for job", job.email_log_id, job_id=job.id
                )
                return
            for key, value in changes.items():
                setattr(log, key, value)
            await session.commit()
