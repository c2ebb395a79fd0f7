"""Pytest configuration and shared fixtures for the EXOCAL client tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from EXOCAL.client.services.controller import JobStateController
from EXOCAL.client.services.delivery import LocalDelivery
from EXOCAL.client.services.poller import PollingPolicy


# [CONSTANTS]
###############################################################################
SERVICE_URL = "https://svc.example"
JOB_ID = "abc123"
STATUS_PATH = f"/api/jobs/{JOB_ID}/status"
DOWNLOAD_PATH = f"/api/jobs/{JOB_ID}/result"
BUNDLE_CONTENT = b"PK\x03\x04exocal-bundle"

StatusStep = dict[str, Any] | Callable[[httpx.Request], httpx.Response]


###############################################################################
class FakeAnalysisService:
    """Scripted stand-in for the remote analysis service.

    Status steps are consumed in order; the last one repeats once the script
    runs out. A step is either a JSON payload or a callable building the
    response (or raising a transport error).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.upload_status = 200
        self.upload_payload: Any = {
            "job_id": JOB_ID,
            "status_url": STATUS_PATH,
            "download_url": DOWNLOAD_PATH,
        }
        self.status_steps: list[StatusStep] = [{"state": "done"}]
        self.download_status = 200
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    # -------------------------------------------------------------------------
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/api/upload":
            return httpx.Response(self.upload_status, json=self.upload_payload)
        if path == STATUS_PATH:
            step = self.status_steps.pop(0) if len(self.status_steps) > 1 else self.status_steps[0]
            if callable(step):
                return step(request)
            return httpx.Response(200, json=step)
        if path == DOWNLOAD_PATH:
            return httpx.Response(self.download_status, content=BUNDLE_CONTENT)
        if path in self.routes:
            return self.routes[path](request)
        return httpx.Response(404, json={"detail": "Not Found"})

    # -------------------------------------------------------------------------
    def requests_to(self, path: str, method: str = "GET") -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.url.path == path and request.method == method
        ]


###############################################################################
class RecordingOpener:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.urls: list[str] = []

    # -------------------------------------------------------------------------
    def __call__(self, url: str) -> bool:
        self.urls.append(url)
        return self.result


###############################################################################
@pytest.fixture
def service_url() -> str:
    """Return the base URL of the fake analysis service."""
    return SERVICE_URL


# -----------------------------------------------------------------------------
@pytest.fixture
def fake_service() -> FakeAnalysisService:
    """Return a scripted analysis service."""
    return FakeAnalysisService()


# -----------------------------------------------------------------------------
@pytest_asyncio.fixture
async def http_client(fake_service: FakeAnalysisService) -> httpx.AsyncClient:
    """Create an async HTTP client routed to the fake service."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_service.handler))
    yield client
    await client.aclose()


# -----------------------------------------------------------------------------
@pytest.fixture
def opener() -> RecordingOpener:
    """Return a browser opener that records the navigated URLs."""
    return RecordingOpener()


# -----------------------------------------------------------------------------
@pytest.fixture
def delivery(tmp_path, opener: RecordingOpener) -> LocalDelivery:
    """Deliver downloaded bundles into a temporary directory."""
    return LocalDelivery(str(tmp_path), opener=opener)


# -----------------------------------------------------------------------------
@pytest_asyncio.fixture
async def controller(
    http_client: httpx.AsyncClient, delivery: LocalDelivery, service_url: str
) -> JobStateController:
    """Create a job controller wired to the fake service with no poll delay."""
    controller = JobStateController(
        base_url=service_url,
        client=http_client,
        policy=PollingPolicy(interval=0.0),
        delivery=delivery,
    )
    yield controller
    await controller.aclose()
