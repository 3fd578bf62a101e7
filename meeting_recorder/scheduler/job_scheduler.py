"""
Single-concurrency job scheduler.
Admits at most one recording job at a time and retries failed attempts.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Set, Union

from meeting_recorder.config import settings, get_logger, SchedulerSettings
from meeting_recorder.core.exceptions import ErrorKind, JobError, classify, get_error_type

logger = get_logger("scheduler")

JobWork = Callable[[], Awaitable[Any]]
JobLogger = Union[logging.Logger, logging.LoggerAdapter]


@dataclass(frozen=True)
class AddJobResult:
    """Outcome of a job submission."""
    accepted: bool


@dataclass
class Job:
    """A unit of work owned by the scheduler for its execution lifetime."""
    work: JobWork
    logger: JobLogger
    retry_count: int = 0


class JobScheduler:
    """
    Admission control for recording jobs.

    ``add_job`` is synchronous: it flips the busy flag before returning and
    contains no suspension point, so two submissions on the same event loop
    can never both be accepted. The job itself runs detached; its outcome is
    only visible through logging and the side effects of the work.
    """

    def __init__(
        self,
        scheduler_settings: Optional[SchedulerSettings] = None,
        on_idle: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the job scheduler.

        Args:
            scheduler_settings: Retry and polling configuration (defaults to global settings).
            on_idle: Called every time a job finishes, successfully or not.
        """
        self._settings = scheduler_settings or settings.scheduler
        self._busy: bool = False
        self._shutdown_requested: bool = False
        self._on_idle = on_idle
        self._current_job: Optional[Job] = None
        self._tasks: Set[asyncio.Task] = set()

    def add_job(self, work: JobWork, job_logger: Optional[JobLogger] = None) -> AddJobResult:
        """
        Submit a job.

        Must be called from inside the running event loop.

        Args:
            work: Coroutine function performing one full attempt.
            job_logger: Logger carrying the job's context.

        Returns:
            AddJobResult with accepted=False when busy or shutting down.
        """
        if self._busy or self._shutdown_requested:
            return AddJobResult(accepted=False)

        # Raises RuntimeError outside a running loop, before any state changes
        asyncio.get_running_loop()
        self._busy = True
        job = Job(work=work, logger=job_logger or logger)
        self._current_job = job

        task = asyncio.create_task(self._run_job(job), name="recording-job")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        job.logger.info("Recording job has been queued and started")
        return AddJobResult(accepted=True)

    async def _run_job(self, job: Job) -> None:
        try:
            await self._execute_with_retry(job)
            job.logger.info("Recording job finished successfully")
        except asyncio.CancelledError:
            job.logger.warning("Recording job was cancelled")
            raise
        except Exception as e:
            job_error = classify(e)
            if job_error.kind == ErrorKind.TERMINAL:
                job.logger.error(f"Terminal error, job is permanently exiting: {e}")
            else:
                job.logger.error(f"Error executing job after {job.retry_count + 1} attempt(s): {e}")
            job.logger.error(f"Recording job has permanently failed [errorType: {get_error_type(e)}]")
        finally:
            self._current_job = None
            self._busy = False
            if self._on_idle:
                try:
                    self._on_idle()
                except Exception as e:
                    logger.error(f"on_idle hook error: {e}")

    async def _execute_with_retry(self, job: Job) -> None:
        """
        Run the job until it succeeds or its attempts are used up.

        The attempt limit is the smaller of the error's own ``max_attempts``
        and the scheduler's global ceiling. Attempt ``n`` failing sleeps
        ``n * retry_backoff_seconds`` before attempt ``n + 1``.
        """
        while True:
            try:
                await job.work()
                return
            except asyncio.CancelledError:
                raise
            except Exception as e:
                job_error = classify(e)
                attempt = job.retry_count + 1

                if job_error.kind == ErrorKind.TERMINAL:
                    job.logger.error(f"{job_error.error_type} is not retryable: {job_error.message}")
                    raise

                limit = self._attempt_limit(job_error)
                if attempt >= limit:
                    job.logger.error(
                        f"{job_error.error_type}: {attempt} of {limit} attempts consumed: {job_error.message}"
                    )
                    raise

                delay = attempt * self._settings.retry_backoff_seconds
                job.logger.warning(f"Attempt {attempt} failed ({e}); retrying in {delay:.0f}s")
                await asyncio.sleep(delay)
                job.retry_count = attempt
                job.logger.warning(f"Retry count: {job.retry_count}")

    def _attempt_limit(self, job_error: JobError) -> int:
        return max(1, min(job_error.max_attempts, self._settings.max_attempts))

    def will_retry(self, error: BaseException) -> bool:
        """
        Whether the running job would be attempted again after failing with ``error``.

        Lets the work report a permanent failure from inside its last attempt.
        """
        job_error = classify(error)
        if job_error.kind == ErrorKind.TERMINAL:
            return False
        attempt = (self._current_job.retry_count if self._current_job else 0) + 1
        return attempt < self._attempt_limit(job_error)

    def is_busy(self) -> bool:
        """Check whether a job is currently admitted."""
        return self._busy

    def is_shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._shutdown_requested

    def request_shutdown(self) -> None:
        """Reject all future submissions. Does not interrupt the running job."""
        if not self._shutdown_requested:
            logger.info("Shutdown requested, no new jobs will be accepted")
        self._shutdown_requested = True

    async def wait_for_completion(self) -> None:
        """Block until the running job (if any) has fully finished."""
        if not self._busy:
            return

        logger.info("Waiting for ongoing job to complete...")
        while self._busy:
            await asyncio.sleep(self._settings.completion_poll_interval_seconds)
        logger.info("All jobs completed")

    @property
    def current_retry_count(self) -> Optional[int]:
        """Retry count of the running job, or None when idle."""
        return self._current_job.retry_count if self._current_job else None
