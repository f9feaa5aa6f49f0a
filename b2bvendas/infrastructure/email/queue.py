"""In-process email delivery queue with bounded, exponentially delayed retries.

Jobs are consumed in priority order (lower number first, FIFO within a
priority) by a single background worker started with the application. A
failed delivery is retried after ``backoff_base_seconds * 2 ** (attempts - 1)``
seconds, capped at ``backoff_max_seconds``, until ``max_attempts`` is reached;
the job is then marked failed and only an explicit ``retry_job`` runs it again.

The queue is best-effort: jobs live in memory and are lost on restart. The
``EmailLog`` rows the handler maintains are the durable record.
"""

import asyncio
import itertools
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

from loguru import logger

from b2bvendas.core.config import EmailConfig
from b2bvendas.core.exceptions import BusinessRuleViolationError, NotFoundError
from b2bvendas.infrastructure.email.transport import EmailMessage

MAX_FINISHED_JOBS = 600


class JobState(StrEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"


@dataclass(slots=True)
class EmailJob:
    email_log_id: int
    message: EmailMessage
    priority: int
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: JobState = JobState.WAITING
    attempts: int = 0
    total_attempts: int = 0
    last_error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    processed_at: datetime | None = None
    finished_at: datetime | None = None


class JobHandler(Protocol):
    async def deliver(self, job: EmailJob) -> None:
        """Send the job's message; raise to signal a failed attempt."""
        ...

    async def record_failure(
        self, job: EmailJob, error: Exception, *, final: bool
    ) -> None:
        """Persist a failed attempt. ``final`` means no retry will follow."""
        ...


class EmailQueue:
    """Priority queue of email jobs plus the worker that drains it."""

    def __init__(self, config: EmailConfig, handler: JobHandler | None = None) -> None:
        self.config = config
        self.handler = handler
        self._queue: asyncio.PriorityQueue[tuple[int, int, str]] = (
            asyncio.PriorityQueue()
        )
        self._sequence = itertools.count()
        self._jobs: dict[str, EmailJob] = {}
        self._finished: deque[str] = deque()
        self._delayed: set[asyncio.Task[None]] = set()
        self._worker: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def add(self, email_log_id: int, message: EmailMessage) -> EmailJob:
        """Enqueue a message; the returned job id is stored on the email log."""
        job = EmailJob(
            email_log_id=email_log_id, message=message, priority=message.priority
        )
        self._jobs[job.id] = job
        self._push(job)
        logger.info(
            "Email added to queue",
            job_id=job.id,
            to=message.to,
            subject=message.subject,
            priority=job.priority,
        )
        return job

    def get_job(self, job_id: str) -> EmailJob | None:
        return self._jobs.get(job_id)

    def stats(self) -> dict[str, int]:
        counts = {state.value: 0 for state in JobState}
        for job in self._jobs.values():
            counts[job.state.value] += 1
        counts["total"] = sum(counts.values())
        return counts

    def retry_job(self, job_id: str) -> EmailJob:
        """Run a failed job again with a fresh attempt budget.

        ``total_attempts`` keeps counting across retries.
        """
        job = self._require(job_id)
        if job.state != JobState.FAILED:
            raise BusinessRuleViolationError(
                "Apenas jobs com falha podem ser reenviados",
                context={"job_id": job_id, "state": job.state},
            )
        job.attempts = 0
        job.last_error = None
        job.finished_at = None
        self._push(job)
        logger.info("Job retry requested", job_id=job_id)
        return job

    def remove_job(self, job_id: str) -> None:
        job = self._require(job_id)
        if job.state == JobState.ACTIVE:
            raise BusinessRuleViolationError(
                "Job em processamento não pode ser removido",
                context={"job_id": job_id},
            )
        del self._jobs[job_id]
        logger.info("Job removed from queue", job_id=job_id)

    async def process(self, job: EmailJob) -> None:
        """Run one delivery attempt and schedule the follow-up."""
        if self.handler is None:
            msg = "EmailQueue has no job handler"
            raise RuntimeError(msg)

        job.state = JobState.ACTIVE
        job.attempts += 1
        job.total_attempts += 1
        job.processed_at = datetime.now(UTC)
        logger.info(
            "Processing email job",
            job_id=job.id,
            to=job.message.to,
            attempt=job.attempts,
        )
        try:
            await self.handler.deliver(job)
        except Exception as exc:  # noqa: BLE001 - any transport failure is retried
            job.last_error = str(exc)
            final = job.attempts >= self.config.max_attempts
            try:
                await self.handler.record_failure(job, exc, final=final)
            except Exception:  # noqa: BLE001 - the job state must still advance
                logger.exception("Failed to record email job failure", job_id=job.id)
            if final:
                self._finish(job, JobState.FAILED)
                logger.error(
                    "Email job failed after {} attempts: {}",
                    job.attempts,
                    exc,
                    job_id=job.id,
                )
            else:
                self._schedule_retry(job)
        else:
            self._finish(job, JobState.COMPLETED)
            logger.info("Email job completed", job_id=job.id, attempts=job.attempts)

    def retry_delay(self, attempts: int) -> float:
        delay = self.config.backoff_base_seconds * 2 ** (attempts - 1)
        return min(delay, self.config.backoff_max_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="email-queue-worker")
        logger.info("Email queue worker started")

    async def stop(self) -> None:
        """Stop the worker and drop pending retries."""
        tasks = [*self._delayed]
        if self._worker is not None:
            tasks.append(self._worker)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._delayed.clear()
        self._worker = None
        logger.info("Email queue worker stopped")

    async def join(self) -> None:
        """Wait until no job is waiting, active or waiting for a retry."""
        while True:
            await self._queue.join()
            if not self._delayed:
                return
            await asyncio.gather(*self._delayed, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            _, _, job_id = await self._queue.get()
            try:
                job = self._jobs.get(job_id)
                if job is not None and job.state == JobState.WAITING:
                    await self.process(job)
            except Exception:  # noqa: BLE001 - the worker must outlive one job
                logger.exception("Email queue worker error", job_id=job_id)
            finally:
                self._queue.task_done()

    def _push(self, job: EmailJob) -> None:
        job.state = JobState.WAITING
        self._queue.put_nowait((job.priority, next(self._sequence), job.id))

    def _schedule_retry(self, job: EmailJob) -> None:
        delay = self.retry_delay(job.attempts)
        job.state = JobState.DELAYED
        logger.warning(
            "Email job attempt {} failed, retrying in {}s",
            job.attempts,
            delay,
            job_id=job.id,
            error=job.last_error,
        )
        task = asyncio.create_task(self._requeue_after(job, delay))
        self._delayed.add(task)
        task.add_done_callback(self._delayed.discard)

    async def _requeue_after(self, job: EmailJob, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._jobs.get(job.id) is job and job.state == JobState.DELAYED:
            self._push(job)

    def _finish(self, job: EmailJob, state: JobState) -> None:
        job.state = state
        job.finished_at = datetime.now(UTC)
        self._finished.append(job.id)
        while len(self._finished) > MAX_FINISHED_JOBS:
            old_id = self._finished.popleft()
            old = self._jobs.get(old_id)
            if old is not None and old.state in (JobState.COMPLETED, JobState.FAILED):
                del self._jobs[old_id]

    def _require(self, job_id: str) -> EmailJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job não encontrado", context={"job_id": job_id})
        return job
