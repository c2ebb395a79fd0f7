"""Job lifecycle state machine.

The controller is the only writer of the current Job. The submitter, poller
and fetcher report their outcomes back to it and it applies the transitions:

    idle -> submitting -> polling -> fetching -> succeeded
                      \\-> idle (submission error)
                                 \\-> failed (job or polling error)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx

from EXOCAL.client.common.exceptions import (
    ExocalError,
    SubmissionError,
    ValidationError,
)
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.configurations import ClientSettings, client_settings
from EXOCAL.client.entities.jobs import (
    DeliveryResult,
    InputSelection,
    Job,
    JobPhase,
    JobProgress,
    JobSnapshot,
    SubmissionParameters,
)
from EXOCAL.client.services.delivery import LocalDelivery, ResultFetcher
from EXOCAL.client.services.health import check_service_health
from EXOCAL.client.services.payload import build_upload_payload
from EXOCAL.client.services.poller import (
    CancellationToken,
    PollingPolicy,
    PollOutcome,
    StatusPoller,
)
from EXOCAL.client.services.submitter import JobSubmitter

SnapshotListener = Callable[[JobSnapshot], None]


###############################################################################
class JobStateController:
    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        policy: PollingPolicy | None = None,
        delivery: LocalDelivery | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        self.settings = settings or client_settings
        self.base_url = (base_url or self.settings.service.base_url).rstrip("/")
        self.owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.service.request_timeout)
        )
        self.submitter = JobSubmitter(self.client, self.base_url)
        self.poller = StatusPoller(
            self.client, policy or PollingPolicy.from_settings(self.settings.polling)
        )
        self.fetcher = ResultFetcher(
            self.client,
            delivery or LocalDelivery(self.settings.delivery.output_dir),
            filename=self.settings.delivery.filename,
            fallback_navigation=self.settings.delivery.fallback_navigation,
        )
        self.state = JobPhase.IDLE
        self.job: Job | None = None
        self.error: ExocalError | None = None
        self.delivery: DeliveryResult | None = None
        self.token: CancellationToken | None = None
        self.task: asyncio.Task | None = None
        self.listeners: list[SnapshotListener] = []

    # -------------------------------------------------------------------------
    def snapshot(self) -> JobSnapshot:
        job = self.job
        return JobSnapshot(
            state=self.state,
            job_id=job.id if job else None,
            progress=job.progress if job and self.state == JobPhase.POLLING else None,
            error=self.error,
            delivery=self.delivery,
        )

    # -------------------------------------------------------------------------
    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    def notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self.listeners):
            try:
                listener(snapshot)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Snapshot listener failed: %s", exc)

    # -------------------------------------------------------------------------
    def transition(self, state: JobPhase, **changes) -> None:
        self.state = state
        for key, value in changes.items():
            setattr(self, key, value)
        if self.job is not None and state != JobPhase.IDLE:
            self.job.state = state
            if state != JobPhase.POLLING:
                self.job.progress = None
            self.job.error_message = (
                str(self.error) if state == JobPhase.FAILED and self.error else None
            )
        logger.debug("Controller state -> %s", state.value)
        self.notify()

    # -------------------------------------------------------------------------
    async def check_health(self) -> bool:
        return await check_service_health(
            self.client, self.base_url, self.settings.service.health_timeout
        )

    # -------------------------------------------------------------------------
    async def submit(
        self,
        selection: InputSelection,
        parameters: SubmissionParameters | None = None,
    ) -> JobSnapshot:
        """Validate and submit the selection, then start tracking the job.

        Returns once the submission has resolved. Any job still tracked from
        a previous submission is cancelled first.
        """
        parameters = parameters or SubmissionParameters(
            limit_targets=self.settings.submission.limit_targets,
            seed=self.settings.submission.seed,
        )
        try:
            payload = build_upload_payload(selection, parameters)
        except ValidationError as exc:
            logger.warning("Submission rejected: %s", exc)
            if not self.snapshot().is_active:
                self.transition(JobPhase.IDLE, job=None, delivery=None, error=exc)
            return self.snapshot()

        self.stop_tracking()
        token = CancellationToken()
        self.token = token
        self.transition(
            JobPhase.SUBMITTING, job=None, error=None, delivery=None, task=None
        )

        try:
            job = await self.submitter.submit(payload)
        except SubmissionError as exc:
            if not token.cancelled:
                self.transition(JobPhase.IDLE, error=exc)
            return self.snapshot()

        if token.cancelled:
            logger.info("Discarding job %s from a superseded submission", job.id)
            return self.snapshot()

        self.job = job
        self.transition(JobPhase.POLLING)
        self.task = asyncio.create_task(self.track(job, token))
        return self.snapshot()

    # -------------------------------------------------------------------------
    async def track(self, job: Job, token: CancellationToken) -> None:
        def apply_progress(progress: JobProgress) -> None:
            if token.cancelled or self.job is not job:
                return
            job.progress = progress
            self.notify()

        outcome = await self.poller.poll(job, token, apply_progress)
        if outcome is None or token.cancelled:
            return
        await self.complete(job, token, outcome)

    # -------------------------------------------------------------------------
    async def complete(
        self, job: Job, token: CancellationToken, outcome: PollOutcome
    ) -> None:
        if not outcome.succeeded:
            logger.error("Job %s failed: %s", job.id, outcome.error)
            self.transition(JobPhase.FAILED, error=outcome.error)
            return

        self.transition(JobPhase.FETCHING)
        delivery = await self.fetcher.fetch_and_deliver(
            outcome.download_url or job.download_url
        )
        if token.cancelled:
            return
        # A failed download is recovered by navigation, the job still succeeded.
        self.transition(JobPhase.SUCCEEDED, delivery=delivery)
        logger.info("Job %s complete", job.id)

    # -------------------------------------------------------------------------
    async def wait(self) -> JobSnapshot:
        if self.task is not None:
            await asyncio.shield(self.task)
        return self.snapshot()

    # -------------------------------------------------------------------------
    async def run(
        self,
        selection: InputSelection,
        parameters: SubmissionParameters | None = None,
    ) -> JobSnapshot:
        snapshot = await self.submit(selection, parameters)
        if snapshot.state != JobPhase.POLLING:
            return snapshot
        return await self.wait()

    # -------------------------------------------------------------------------
    def stop_tracking(self) -> None:
        if self.token is not None:
            self.token.cancel()

    # -------------------------------------------------------------------------
    def cancel(self) -> None:
        """Abandon the in-flight job. Its late responses are discarded and the
        controller returns to idle, ready for a new submission."""
        self.stop_tracking()
        if self.snapshot().is_active:
            logger.info("Job tracking cancelled")
            self.transition(JobPhase.IDLE, job=None, task=None)

    # -------------------------------------------------------------------------
    def reset(self) -> None:
        self.stop_tracking()
        self.token = None
        self.task = None
        self.job = None
        self.transition(JobPhase.IDLE, error=None, delivery=None)

    # -------------------------------------------------------------------------
    async def aclose(self) -> None:
        task = self.task
        self.stop_tracking()
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self.owns_client:
            await self.client.aclose()

    # -------------------------------------------------------------------------
    async def __aenter__(self) -> JobStateController:
        return self

    # -------------------------------------------------------------------------
    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
