from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import BUNDLE_CONTENT, DOWNLOAD_PATH, SERVICE_URL, STATUS_PATH
from EXOCAL.client.common.exceptions import (
    JobError,
    PollingTransportError,
    SubmissionError,
    ValidationError,
)
from EXOCAL.client.entities.jobs import (
    InputSelection,
    JobPhase,
    JobSnapshot,
    SelectedFile,
    SubmissionParameters,
)


def demo_selection(kind: str = "toi") -> InputSelection:
    selection = InputSelection()
    selection.set_demo(kind)
    return selection


def running(percent: float) -> dict:
    return {
        "state": "running",
        "progress": {"dataset": "toi", "percent": percent, "message": "fitting"},
    }


###############################################################################
class TestJobLifecycle:
    @pytest.mark.asyncio
    async def test_demo_submission_runs_to_success(self, controller, fake_service, tmp_path):
        fake_service.status_steps = [running(12.5), {"state": "done"}]
        snapshots: list[JobSnapshot] = []
        controller.subscribe(snapshots.append)

        submitted = await controller.submit(demo_selection())

        assert submitted.state == JobPhase.POLLING
        assert submitted.job_id == "abc123"
        upload = fake_service.requests_to("/api/upload", method="POST")[0]
        assert upload.url.params["limit_targets"] == "50"
        assert upload.url.params["seed"] == "7"
        assert b'name="use_demo_toi"' in upload.content

        final = await controller.wait()

        assert final.state == JobPhase.SUCCEEDED
        assert final.progress is None
        assert final.delivery is not None and final.delivery.delivered
        assert (tmp_path / "results.zip").read_bytes() == BUNDLE_CONTENT
        states = [snapshot.state for snapshot in snapshots]
        assert states[0] == JobPhase.SUBMITTING
        assert states[-2:] == [JobPhase.FETCHING, JobPhase.SUCCEEDED]
        progress = [s.progress for s in snapshots if s.progress is not None]
        assert progress[0].dataset == "toi" and progress[0].percent == 12.5
        assert len(fake_service.requests_to(DOWNLOAD_PATH)) == 1

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_file_upload_uses_custom_parameters(self, controller, fake_service):
        selection = InputSelection()
        selection.select_file("koi", SelectedFile(filename="koi.csv", content=b"kepid\n7\n"))

        final = await controller.run(selection, SubmissionParameters(limit_targets=5, seed=9))

        assert final.state == JobPhase.SUCCEEDED
        upload = fake_service.requests_to("/api/upload", method="POST")[0]
        assert upload.url.params["limit_targets"] == "5"
        assert upload.url.params["seed"] == "9"
        assert b'filename="koi.csv"' in upload.content

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_empty_selection_issues_no_request(self, controller, fake_service):
        snapshot = await controller.submit(InputSelection())

        assert snapshot.state == JobPhase.IDLE
        assert isinstance(snapshot.error, ValidationError)
        assert snapshot.error_message == "no input provided"
        assert fake_service.requests == []

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_job_error_fails_the_job(self, controller, fake_service):
        fake_service.status_steps = [running(5), {"state": "error", "error": "bad data"}]

        final = await controller.run(demo_selection())

        assert final.state == JobPhase.FAILED
        assert isinstance(final.error, JobError)
        assert final.error_message == "bad data"
        assert controller.job.error_message == "bad data"
        assert fake_service.requests_to(DOWNLOAD_PATH) == []

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_status_failure_fails_the_job(self, controller, fake_service):
        fake_service.status_steps = [lambda request: httpx.Response(502)]

        final = await controller.run(demo_selection())

        assert final.state == JobPhase.FAILED
        assert isinstance(final.error, PollingTransportError)
        assert final.error_message == "Failed to check job status"

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_submission_error_returns_to_idle(self, controller, fake_service):
        fake_service.upload_status = 503

        final = await controller.run(demo_selection())

        assert final.state == JobPhase.IDLE
        assert final.job_id is None
        assert isinstance(final.error, SubmissionError)
        assert final.error_message == "Server error occurred. Please try again later."
        assert fake_service.requests_to(STATUS_PATH) == []

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_failed_download_still_succeeds(self, controller, fake_service, opener):
        fake_service.download_status = 500

        final = await controller.run(demo_selection())

        assert final.state == JobPhase.SUCCEEDED
        assert final.delivery.delivered is False
        assert final.delivery.navigated is True
        assert opener.urls == [f"{SERVICE_URL}{DOWNLOAD_PATH}"]

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_absolute_job_urls_are_used_verbatim(self, controller, fake_service):
        fake_service.upload_payload = {
            "job_id": "abc123",
            "status_url": f"{SERVICE_URL}{STATUS_PATH}",
            "download_url": f"{SERVICE_URL}{DOWNLOAD_PATH}",
        }

        final = await controller.run(demo_selection())

        assert final.state == JobPhase.SUCCEEDED
        assert len(fake_service.requests_to(STATUS_PATH)) == 1


###############################################################################
class TestCancellation:
    @pytest.mark.asyncio
    async def test_resubmission_abandons_previous_job(self, controller, fake_service):
        in_flight = asyncio.Event()
        release = asyncio.Event()

        async def stalled(request: httpx.Request) -> httpx.Response:
            in_flight.set()
            await release.wait()
            return httpx.Response(200, json={"state": "error", "error": "stale"})

        fake_service.status_steps = [stalled, {"state": "done"}]
        await controller.submit(demo_selection())
        first_task = controller.task
        await in_flight.wait()

        await controller.submit(demo_selection("koi"))
        release.set()
        await first_task
        final = await controller.wait()

        assert final.state == JobPhase.SUCCEEDED
        assert final.error is None
        assert len(fake_service.requests_to("/api/upload", method="POST")) == 2

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_reset_stops_tracking(self, controller, fake_service):
        fake_service.status_steps = [running(3)]
        await controller.submit(demo_selection())
        task = controller.task
        while not fake_service.requests_to(STATUS_PATH):
            await asyncio.sleep(0)

        controller.reset()
        await task
        checks = len(fake_service.requests_to(STATUS_PATH))
        await asyncio.sleep(0.01)

        snapshot = controller.snapshot()
        assert snapshot.state == JobPhase.IDLE
        assert snapshot.job_id is None
        assert snapshot.error is None
        assert len(fake_service.requests_to(STATUS_PATH)) == checks

    # -------------------------------------------------------------------------
    @pytest.mark.asyncio
    async def test_validation_while_active_keeps_current_job(self, controller, fake_service):
        fake_service.status_steps = [running(3)]
        await controller.submit(demo_selection())

        snapshot = await controller.submit(InputSelection())

        assert snapshot.state == JobPhase.POLLING
        assert snapshot.job_id == "abc123"
        assert len(fake_service.requests_to("/api/upload", method="POST")) == 1
        controller.reset()


###############################################################################
class TestListeners:
    @pytest.mark.asyncio
    async def test_unsubscribe_and_failing_listener(self, controller):
        received: list[JobSnapshot] = []

        def broken(snapshot: JobSnapshot) -> None:
            raise RuntimeError("listener bug")

        controller.subscribe(broken)
        unsubscribe = controller.subscribe(received.append)
        final = await controller.run(demo_selection())
        count = len(received)
        unsubscribe()
        controller.reset()

        assert final.state == JobPhase.SUCCEEDED
        assert count > 0
        assert len(received) == count


###############################################################################
class TestUnreadableInput:
    @pytest.mark.asyncio
    async def test_missing_file_is_reported_without_request(self, controller, fake_service, tmp_path):
        selection = InputSelection()
        selection.select_file("toi", str(tmp_path / "missing.csv"))

        snapshot = await controller.run(selection)

        assert snapshot.state == JobPhase.IDLE
        assert isinstance(snapshot.error, ValidationError)
        assert snapshot.error_message == "Cannot read selected file missing.csv"
        assert fake_service.requests == []


###############################################################################
class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_returns_to_idle_and_accepts_new_input(self, controller, fake_service):
        fake_service.status_steps = [running(3)]
        await controller.submit(demo_selection())
        task = controller.task

        controller.cancel()
        await task

        assert controller.snapshot().state == JobPhase.IDLE
        assert controller.snapshot().job_id is None

        snapshot = await controller.submit(InputSelection())

        assert snapshot.state == JobPhase.IDLE
        assert isinstance(snapshot.error, ValidationError)
        assert snapshot.error_message == "no input provided"
