"""Unit tests for the in-process email queue and its retry policy."""

from collections.abc import AsyncGenerator

import pytest
import pytest_check
from pytest_mock import MockerFixture

from b2bvendas.core.config import EmailConfig
from b2bvendas.core.exceptions import BusinessRuleViolationError, NotFoundError
from b2bvendas.infrastructure.constants import (
    EMAIL_PRIORITY_HIGH,
    EMAIL_PRIORITY_NORMAL,
)
from b2bvendas.infrastructure.email import (
    EmailDeliveryError,
    EmailJob,
    EmailMessage,
    EmailQueue,
    JobState,
)


class RecordingHandler:
    """Job handler failing the first ``failures`` attempts of every job."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.delivered: list[str] = []
        self.failed: list[tuple[str, int, bool]] = []

    async def deliver(self, job: EmailJob) -> None:
        if job.attempts <= self.failures:
            msg = f"SMTP indisponível (tentativa {job.attempts})"
            raise EmailDeliveryError(msg)
        self.delivered.append(job.id)

    async def record_failure(
        self, job: EmailJob, error: Exception, *, final: bool
    ) -> None:
        self.failed.append((job.id, job.attempts, final))


class BrokenLogHandler(RecordingHandler):
    """Handler whose failure bookkeeping cannot reach the database."""

    async def record_failure(
        self, job: EmailJob, error: Exception, *, final: bool
    ) -> None:
        await super().record_failure(job, error, final=final)
        msg = "database is locked"
        raise ConnectionError(msg)


def _message(priority: int = EMAIL_PRIORITY_NORMAL) -> EmailMessage:
    return EmailMessage(
        to="compras@mercado.com.br",
        subject="Pedido confirmado",
        text="Seu pedido foi confirmado.",
        priority=priority,
    )


@pytest.fixture
def config() -> EmailConfig:
    return EmailConfig(max_attempts=3, backoff_base_seconds=0)


@pytest.fixture
async def running_queue(config: EmailConfig) -> AsyncGenerator[EmailQueue]:
    queue = EmailQueue(config)
    yield queue
    await queue.stop()


@pytest.mark.unit
class TestEmailQueue:
    """Test job bookkeeping, delivery and retries."""

    async def test_add_creates_waiting_job(self, config: EmailConfig) -> None:
        queue = EmailQueue(config, RecordingHandler())

        job = queue.add(10, _message())

        assert job.state == JobState.WAITING
        assert job.email_log_id == 10
        assert queue.get_job(job.id) is job
        assert queue.stats()["waiting"] == 1
        assert queue.stats()["total"] == 1

    async def test_successful_delivery(self, running_queue: EmailQueue) -> None:
        handler = RecordingHandler()
        running_queue.handler = handler
        job = running_queue.add(1, _message())

        running_queue.start()
        await running_queue.join()

        with pytest_check.check:
            assert job.state == JobState.COMPLETED
        with pytest_check.check:
            assert job.attempts == 1
        with pytest_check.check:
            assert handler.delivered == [job.id]
        with pytest_check.check:
            assert job.finished_at is not None

    async def test_retries_until_success(self, running_queue: EmailQueue) -> None:
        handler = RecordingHandler(failures=2)
        running_queue.handler = handler
        job = running_queue.add(1, _message())

        running_queue.start()
        await running_queue.join()

        assert job.state == JobState.COMPLETED
        assert job.attempts == 3
        assert handler.failed == [(job.id, 1, False), (job.id, 2, False)]

    async def test_fails_after_max_attempts(self, running_queue: EmailQueue) -> None:
        """A job failing every attempt ends failed and is not retried again."""
        handler = RecordingHandler(failures=99)
        running_queue.handler = handler
        job = running_queue.add(1, _message())

        running_queue.start()
        await running_queue.join()

        assert job.state == JobState.FAILED
        assert job.attempts == 3
        assert handler.failed[-1] == (job.id, 3, True)
        assert [final for _, _, final in handler.failed] == [False, False, True]
        assert "tentativa 3" in (job.last_error or "")
        assert handler.delivered == []

    async def test_higher_priority_first(self, running_queue: EmailQueue) -> None:
        handler = RecordingHandler()
        running_queue.handler = handler
        normal = running_queue.add(1, _message(EMAIL_PRIORITY_NORMAL))
        urgent = running_queue.add(2, _message(EMAIL_PRIORITY_HIGH))

        running_queue.start()
        await running_queue.join()

        assert handler.delivered == [urgent.id, normal.id]

    async def test_manual_retry_of_failed_job(self, running_queue: EmailQueue) -> None:
        handler = RecordingHandler(failures=3)
        running_queue.handler = handler
        job = running_queue.add(1, _message())
        running_queue.start()
        await running_queue.join()
        assert job.state == JobState.FAILED

        handler.failures = 0
        running_queue.retry_job(job.id)
        await running_queue.join()

        assert job.state == JobState.COMPLETED
        assert job.attempts == 1

    async def test_failure_bookkeeping_error_still_retries(
        self, running_queue: EmailQueue
    ) -> None:
        handler = BrokenLogHandler(failures=1)
        running_queue.handler = handler
        job = running_queue.add(1, _message())

        running_queue.start()
        await running_queue.join()

        assert job.state == JobState.COMPLETED
        assert job.attempts == 2
        assert handler.failed == [(job.id, 1, False)]
        assert handler.delivered == [job.id]

    async def test_failure_bookkeeping_error_still_fails_job(
        self, running_queue: EmailQueue
    ) -> None:
        """The last attempt ends failed even when its log write breaks."""
        handler = BrokenLogHandler(failures=99)
        running_queue.handler = handler
        job = running_queue.add(1, _message())

        running_queue.start()
        await running_queue.join()

        assert job.state == JobState.FAILED
        assert job.finished_at is not None
        assert running_queue.stats()["active"] == 0

        handler.failures = 0
        running_queue.retry_job(job.id)
        await running_queue.join()

        assert job.state == JobState.COMPLETED

    async def test_total_attempts_accumulate_across_retries(
        self, running_queue: EmailQueue
    ) -> None:
        handler = RecordingHandler(failures=3)
        running_queue.handler = handler
        job = running_queue.add(1, _message())
        running_queue.start()
        await running_queue.join()

        handler.failures = 0
        running_queue.retry_job(job.id)
        await running_queue.join()

        assert job.attempts == 1
        assert job.total_attempts == 4

    async def test_retry_rejects_unfinished_jobs(self, config: EmailConfig) -> None:
        queue = EmailQueue(config, RecordingHandler())
        job = queue.add(1, _message())

        with pytest.raises(BusinessRuleViolationError):
            queue.retry_job(job.id)

    async def test_remove_job(self, config: EmailConfig) -> None:
        queue = EmailQueue(config, RecordingHandler())
        job = queue.add(1, _message())

        queue.remove_job(job.id)

        assert queue.get_job(job.id) is None
        with pytest.raises(NotFoundError):
            queue.remove_job(job.id)

    async def test_removed_job_is_skipped_by_worker(
        self, running_queue: EmailQueue
    ) -> None:
        handler = RecordingHandler()
        running_queue.handler = handler
        job = running_queue.add(1, _message())
        running_queue.remove_job(job.id)

        running_queue.start()
        await running_queue.join()

        assert handler.delivered == []

    async def test_process_without_handler(self, config: EmailConfig) -> None:
        queue = EmailQueue(config)
        job = queue.add(1, _message())

        with pytest.raises(RuntimeError, match="no job handler"):
            await queue.process(job)

    @pytest.mark.parametrize(
        ("attempts", "expected"), [(1, 2.0), (2, 4.0), (3, 8.0), (10, 60.0)]
    )
    def test_retry_delay_backoff(self, attempts: int, expected: float) -> None:
        queue = EmailQueue(EmailConfig(backoff_base_seconds=2, backoff_max_seconds=60))

        assert queue.retry_delay(attempts) == expected

    async def test_stop_is_idempotent(
        self, config: EmailConfig, mocker: MockerFixture
    ) -> None:
        queue = EmailQueue(config, mocker.AsyncMock())
        queue.start()
        assert queue.running

        await queue.stop()
        await queue.stop()

        assert not queue.running
