"""Status polling loop for a submitted analysis job."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from pydantic import ValidationError as SchemaValidationError

from EXOCAL.client.common.constants import (
    DEFAULT_POLLING_INTERVAL,
    JOB_FAILED_FALLBACK_MESSAGE,
    JOB_STATE_DONE,
    JOB_STATE_ERROR,
    STATUS_CHECK_FAILED_MESSAGE,
)
from EXOCAL.client.common.exceptions import (
    ExocalError,
    JobError,
    PollingExhaustedError,
    PollingTransportError,
)
from EXOCAL.client.common.utils.encoding import decode_json_response_bytes
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.entities.jobs import Job, JobProgress
from EXOCAL.client.entities.settings import PollingSettings
from EXOCAL.client.schemas.jobs import JobProgressPayload, JobStatusResponse


###############################################################################
class CancellationToken:
    """Cooperative stop flag shared between a job's owner and its poll loop."""

    def __init__(self) -> None:
        self._cancelled = False

    # -------------------------------------------------------------------------
    def cancel(self) -> None:
        self._cancelled = True

    # -------------------------------------------------------------------------
    @property
    def cancelled(self) -> bool:
        return self._cancelled


###############################################################################
@dataclass(frozen=True)
class PollingPolicy:
    interval: float = DEFAULT_POLLING_INTERVAL
    max_attempts: int | None = None

    # -------------------------------------------------------------------------
    @classmethod
    def from_settings(cls, settings: PollingSettings) -> PollingPolicy:
        return cls(interval=settings.interval, max_attempts=settings.max_attempts)


###############################################################################
@dataclass(frozen=True)
class PollOutcome:
    download_url: str | None = None
    error: ExocalError | None = None

    # -------------------------------------------------------------------------
    @property
    def succeeded(self) -> bool:
        return self.error is None


###############################################################################
@dataclass
class PollingHandle:
    token: CancellationToken
    task: asyncio.Task

    # -------------------------------------------------------------------------
    def cancel(self) -> None:
        self.token.cancel()

    # -------------------------------------------------------------------------
    async def wait(self) -> PollOutcome | None:
        return await self.task


# -------------------------------------------------------------------------
def to_progress(payload: JobProgressPayload) -> JobProgress:
    last_target = payload.last_target
    return JobProgress(
        dataset=payload.dataset or "",
        percent=min(100.0, max(0.0, float(payload.percent))),
        message=payload.message or "",
        last_target=str(last_target) if last_target not in (None, "") else None,
    )


###############################################################################
class StatusPoller:
    def __init__(
        self, client: httpx.AsyncClient, policy: PollingPolicy | None = None
    ) -> None:
        self.client = client
        self.policy = policy or PollingPolicy()

    # -------------------------------------------------------------------------
    def start(
        self,
        job: Job,
        token: CancellationToken | None = None,
        on_progress: Callable[[JobProgress], None] | None = None,
    ) -> PollingHandle:
        token = token or CancellationToken()
        task = asyncio.create_task(self.poll(job, token, on_progress))
        return PollingHandle(token=token, task=task)

    # -------------------------------------------------------------------------
    async def fetch_status(self, job: Job) -> JobStatusResponse:
        response = await self.client.get(job.status_url)
        response.raise_for_status()
        return JobStatusResponse.model_validate(
            decode_json_response_bytes(response.content)
        )

    # -------------------------------------------------------------------------
    async def poll(
        self,
        job: Job,
        token: CancellationToken,
        on_progress: Callable[[JobProgress], None] | None = None,
    ) -> PollOutcome | None:
        """Query the job status until it reaches a terminal state.

        Returns None when the token was cancelled, in which case nothing was
        reported after the cancellation. A failed status request ends the loop
        with a PollingTransportError; it is not retried.
        """
        attempts = 0
        while not token.cancelled:
            attempts += 1
            try:
                status = await self.fetch_status(job)
            except (httpx.HTTPError, json.JSONDecodeError, SchemaValidationError) as exc:
                if token.cancelled:
                    return None
                logger.warning("Status check for job %s failed: %s", job.id, exc)
                return PollOutcome(error=PollingTransportError(STATUS_CHECK_FAILED_MESSAGE))

            if token.cancelled:
                logger.debug("Discarding status of cancelled job %s", job.id)
                return None

            if status.progress is not None and on_progress is not None:
                on_progress(to_progress(status.progress))

            if status.state == JOB_STATE_DONE:
                logger.info("Job %s finished after %d status checks", job.id, attempts)
                return PollOutcome(download_url=job.download_url)

            if status.state == JOB_STATE_ERROR:
                message = status.error or JOB_FAILED_FALLBACK_MESSAGE
                logger.error("Job %s reported an error: %s", job.id, message)
                return PollOutcome(error=JobError(message))

            max_attempts = self.policy.max_attempts
            if max_attempts is not None and attempts >= max_attempts:
                logger.warning(
                    "Job %s still %s after %d status checks", job.id, status.state, attempts
                )
                return PollOutcome(
                    error=PollingExhaustedError(
                        f"Job did not finish after {attempts} status checks", attempts
                    )
                )

            await asyncio.sleep(self.policy.interval)

        return None
