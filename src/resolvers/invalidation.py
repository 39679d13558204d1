"""
CloudFront cache invalidation after deploy.

Submits one invalidation for ``/*`` and polls its status on a fixed interval
until CloudFront reports it completed. Waiting between polls goes through an
injectable ``wait`` callable (``threading.Event.wait`` by default) so tests can
drive the loop with a fake clock and callers can stop waiting at any time.
Stopping only ends the local wait; the invalidation keeps running remotely.
"""

import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from ..utils.clients import DistributionDirectory
from ..utils.errors import (
    InvalidArgumentError,
    InvalidationCancelledError,
    InvalidationTimeoutError,
    ProviderUnavailableError,
)
from ..utils.logging import StructuredLogger, get_logger
from ..utils.models import INVALIDATION_PATHS, InvalidationJob, InvalidationStatus, Outcome

logger = get_logger(__name__)

# Exact status CloudFront reports for a finished invalidation
COMPLETED_STATUS = "Completed"


def time_caller_reference() -> str:
    """Caller reference from the submission time plus a random suffix."""
    return f"{time.time_ns()}-{uuid.uuid4().hex}"


class InvalidationCoordinator:
    """Submits an invalidation and waits for it to complete."""

    def __init__(
        self,
        directory: DistributionDirectory,
        *,
        poll_interval: float = 1.0,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        wait: Optional[Callable[[float], bool]] = None,
        reference_factory: Callable[[], str] = time_caller_reference,
        max_consecutive_failures: int = 3,
        log: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            directory: CloudFront directory used for submission and status reads
            poll_interval: Seconds between status reads
            deadline: Seconds to wait for completion; None waits without bound
            clock: Monotonic time source in seconds
            wait: Sleeps for the given seconds and returns True when waiting
                was cancelled. Defaults to the coordinator's cancel event.
            reference_factory: Produces a unique caller reference per submission
            max_consecutive_failures: Failed status reads tolerated in a row
        """
        if poll_interval <= 0:
            raise InvalidArgumentError("poll_interval must be positive", {"pollInterval": poll_interval})
        if deadline is not None and deadline < 0:
            raise InvalidArgumentError("deadline must not be negative", {"deadline": deadline})
        if max_consecutive_failures < 1:
            raise InvalidArgumentError(
                "max_consecutive_failures must be at least 1",
                {"maxConsecutiveFailures": max_consecutive_failures},
            )

        self._directory = directory
        self._poll_interval = poll_interval
        self._deadline = deadline
        self._clock = clock
        self._cancelled = threading.Event()
        self._wait = wait or self._cancelled.wait
        self._reference_factory = reference_factory
        self._max_failures = max_consecutive_failures
        self._log = log or logger

    def cancel(self) -> None:
        """Stop waiting locally. The remote invalidation is not cancelled."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def submit(self, distribution_id: str) -> InvalidationJob:
        """Create the invalidation; one call, no retries."""
        job = InvalidationJob(
            distribution_id=distribution_id,
            caller_reference=self._reference_factory(),
            paths=INVALIDATION_PATHS,
        )
        job.invalidation_id = self._directory.create_invalidation(
            distribution_id, job.paths, job.caller_reference
        )
        job.transition(InvalidationStatus.SUBMITTED)
        self._log.info(
            "Created invalidation",
            distributionId=distribution_id,
            invalidationId=job.invalidation_id,
            callerReference=job.caller_reference,
        )
        return job

    def invalidate(self, distribution_id: str) -> InvalidationJob:
        """
        Submit an invalidation and poll until it completes.

        Returns:
            The job in COMPLETED status

        Raises:
            ProviderUnavailableError: If submission fails, or status reads fail
                max_consecutive_failures times in a row
            InvalidationTimeoutError: If the deadline elapses first
            InvalidationCancelledError: If cancel() was called while waiting
        """
        job = self.submit(distribution_id)
        self.wait_for(job)
        return job

    def wait_for(self, job: InvalidationJob) -> None:
        """Poll a submitted job until it reaches a terminal status."""
        assert job.invalidation_id is not None
        started = self._clock()
        failures = 0

        while True:
            if self._cancelled.is_set():
                raise self._cancelled_error(job)

            job.polls += 1
            try:
                status: Optional[str] = self._directory.get_invalidation_status(
                    job.distribution_id, job.invalidation_id
                )
                failures = 0
            except ProviderUnavailableError as e:
                failures += 1
                self._log.warning(
                    "Invalidation status read failed",
                    invalidationId=job.invalidation_id,
                    attempt=failures,
                    error=e.message,
                )
                if failures >= self._max_failures:
                    job.transition(InvalidationStatus.FAILED)
                    raise
                status = None

            if status == COMPLETED_STATUS:
                job.transition(InvalidationStatus.COMPLETED)
                self._log.info(
                    "Invalidation completed", invalidationId=job.invalidation_id, polls=job.polls
                )
                return

            if status is not None and job.status is not InvalidationStatus.IN_PROGRESS:
                job.transition(InvalidationStatus.IN_PROGRESS)
            self._log.debug("Invalidation pending", invalidationId=job.invalidation_id, status=status)

            delay = self._poll_interval
            if self._deadline is not None:
                remaining = self._deadline - (self._clock() - started)
                if remaining <= 0:
                    raise InvalidationTimeoutError(
                        f"Invalidation {job.invalidation_id} did not complete "
                        f"within {self._deadline} seconds",
                        {
                            "distributionId": job.distribution_id,
                            "invalidationId": job.invalidation_id,
                            "polls": job.polls,
                        },
                    )
                delay = min(delay, remaining)

            if self._wait(delay):
                raise self._cancelled_error(job)

    def start(
        self, distribution_id: str, executor: Optional[ThreadPoolExecutor] = None
    ) -> "Future[InvalidationJob]":
        """Run invalidate() off the calling thread."""
        if executor is not None:
            return executor.submit(self.invalidate, distribution_id)
        own_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="invalidation")
        future = own_executor.submit(self.invalidate, distribution_id)
        own_executor.shutdown(wait=False)
        return future

    def _cancelled_error(self, job: InvalidationJob) -> InvalidationCancelledError:
        self._log.info("Stopped waiting for invalidation", invalidationId=job.invalidation_id)
        return InvalidationCancelledError(
            f"Stopped waiting for invalidation {job.invalidation_id}",
            {"distributionId": job.distribution_id, "invalidationId": job.invalidation_id},
        )


def run_invalidation(
    directory: DistributionDirectory,
    stack_name: str,
    coordinator: InvalidationCoordinator,
    log: Optional[StructuredLogger] = None,
) -> Tuple[Outcome, Optional[InvalidationJob]]:
    """
    Invalidate the stack's distribution, if it has one.

    Returns:
        (Outcome.SKIPPED, None) when the stack has no distribution, otherwise
        (Outcome.COMPLETED, job)
    """
    log = log or logger
    distribution_id = directory.find_distribution_id(stack_name)
    if not distribution_id:
        log.info("No distribution found, skipping invalidation", stackName=stack_name)
        return Outcome.SKIPPED, None
    return Outcome.COMPLETED, coordinator.invalidate(distribution_id)
