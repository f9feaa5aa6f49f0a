"""Unit tests for the queue handler that sends email and updates its log."""

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError

from b2bvendas.domain.email.service import EmailDeliveryHandler
from b2bvendas.infrastructure.email import EmailJob, EmailMessage


class RecordingTransport:
    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> str:
        self.sent.append(message)
        return f"msg_{len(self.sent)}"


def _job() -> EmailJob:
    message = EmailMessage(
        to="compras@mercado.com.br", subject="Bem-vindo", text="Olá"
    )
    return EmailJob(email_log_id=42, message=message, priority=5, attempts=1)


def _database_down() -> OperationalError:
    return OperationalError("UPDATE email_logs", {}, Exception("connection lost"))


@pytest.mark.unit
class TestEmailDeliveryHandler:
    """Test how delivery reacts to a database that stops answering."""

    async def test_sent_email_is_not_reported_as_failed(
        self, mocker: MockerFixture
    ) -> None:
        """A log write failing after the send must not trigger a resend."""
        transport = RecordingTransport()
        session_factory = mocker.MagicMock(side_effect=_database_down())
        handler = EmailDeliveryHandler(session_factory, transport)

        await handler.deliver(_job())

        assert len(transport.sent) == 1
        session_factory.assert_called_once()

    async def test_failure_bookkeeping_propagates(
        self, mocker: MockerFixture
    ) -> None:
        session_factory = mocker.MagicMock(side_effect=_database_down())
        handler = EmailDeliveryHandler(session_factory, RecordingTransport())

        with pytest.raises(OperationalError):
            await handler.record_failure(
                _job(), RuntimeError("SMTP fora do ar"), final=True
            )

    async def test_log_records_total_attempts(self, mocker: MockerFixture) -> None:
        log = mocker.MagicMock()
        session = mocker.AsyncMock()
        session.get.return_value = log
        session_factory = mocker.MagicMock()
        session_factory.return_value.__aenter__.return_value = session
        handler = EmailDeliveryHandler(session_factory, RecordingTransport())
        job = _job()
        job.total_attempts = 4

        await handler.deliver(job)

        assert log.attempts == 4
        assert log.external_id == "msg_1"
        session.commit.assert_awaited_once()
