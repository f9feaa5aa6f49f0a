"""Outbound email: message model, transports and the delivery queue."""

from b2bvendas.infrastructure.email.queue import (
    EmailJob,
    EmailQueue,
    JobHandler,
    JobState,
)
from b2bvendas.infrastructure.email.transport import (
    EmailDeliveryError,
    EmailMessage,
    EmailTransport,
    LoggingTransport,
)

__all__ = [
    "EmailDeliveryError",
    "EmailJob",
    "EmailMessage",
    "EmailQueue",
    "EmailTransport",
    "JobHandler",
    "JobState",
    "LoggingTransport",
]
