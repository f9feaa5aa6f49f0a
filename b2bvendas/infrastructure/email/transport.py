"""Email message model and the transports that deliver it.

Provider integrations implement ``EmailTransport``. The default
``LoggingTransport`` only records the message, which is what development and
test environments use.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger

from b2bvendas.core.exceptions import AppError, ErrorCode, Severity
from b2bvendas.infrastructure.constants import EMAIL_PRIORITY_NORMAL


class EmailDeliveryError(AppError):
    """The transport could not hand the message over to the provider."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(
            ErrorCode.INTERNAL_ERROR, message, Severity.MEDIUM, cause=cause
        )


@dataclass(slots=True)
class EmailMessage:
    """A fully rendered message ready to be handed to a transport."""

    to: str
    subject: str
    html: str | None = None
    text: str | None = None
    from_address: str | None = None
    reply_to: str | None = None
    template: str = "custom"
    template_data: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    priority: int = EMAIL_PRIORITY_NORMAL

    def __post_init__(self) -> None:
        if not self.html and not self.text:
            msg = "Either html or text must be provided"
            raise ValueError(msg)


class EmailTransport(Protocol):
    async def send(self, message: EmailMessage) -> str:
        """Deliver ``message`` and return the provider's message id.

        Raises:
            EmailDeliveryError: If the provider rejected or never received it.
        """
        ...


class LoggingTransport:
    """Transport that writes messages to the log instead of sending them."""

    async def send(self, message: EmailMessage) -> str:
        message_id = f"log_{uuid.uuid4().hex}"
        logger.info(
            "Email to {} not sent (logging transport): {}",
            message.to,
            message.subject,
            message_id=message_id,
            template=message.template,
            tags=message.tags,
        )
        return message_id
