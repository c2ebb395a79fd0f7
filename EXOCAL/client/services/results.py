"""Read-only access to the artifacts of a finished job."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx

from EXOCAL.client.common.constants import (
    JOB_ARTIFACTS_ENDPOINT,
    JOB_BUNDLE_FILENAME_TEMPLATE,
    JOB_CANDIDATES_ENDPOINT,
    JOB_DOWNLOAD_ENDPOINT,
    JOB_FIGURES_ENDPOINT,
    JOBS_ROUTER_PREFIX,
    RESULTS_DOWNLOAD_FAILED_MESSAGE,
    RESULTS_LOAD_FAILED_MESSAGE,
)
from EXOCAL.client.common.exceptions import ResultsError
from EXOCAL.client.common.utils.encoding import (
    decode_json_response_bytes,
    decode_response_text,
)
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.schemas.jobs import FiguresManifest
from EXOCAL.client.services.candidates import parse_candidates_csv
from EXOCAL.client.services.delivery import LocalDelivery


###############################################################################
@dataclass(frozen=True)
class FigureReference:
    url: str
    dataset: str
    kind: str = "summary"


###############################################################################
@dataclass
class JobResults:
    job_id: str
    figures: FiguresManifest
    artifacts: dict[str, Any] | list[Any]
    candidates: list[dict[str, Any]] = field(default_factory=list)

    # -------------------------------------------------------------------------
    def summary_images(self) -> list[FigureReference]:
        return summary_images(self.figures)


# -------------------------------------------------------------------------
def summary_images(figures: FiguresManifest) -> list[FigureReference]:
    # summary figures only, per-target plots are not listed
    return [
        FigureReference(url=url, dataset=dataset)
        for dataset, data in figures.datasets.items()
        for url in data.summary
    ]


###############################################################################
class JobResultsClient:
    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.jobs_url = f"{base_url.rstrip('/')}{JOBS_ROUTER_PREFIX}"

    # -------------------------------------------------------------------------
    def job_url(self, template: str, job_id: str) -> str:
        return f"{self.jobs_url}{template.format(job_id=job_id)}"

    # -------------------------------------------------------------------------
    async def get(self, url: str) -> httpx.Response:
        response = await self.client.get(url)
        response.raise_for_status()
        return response

    # -------------------------------------------------------------------------
    async def fetch_figures(self, job_id: str) -> FiguresManifest:
        response = await self.get(self.job_url(JOB_FIGURES_ENDPOINT, job_id))
        return FiguresManifest.model_validate(
            decode_json_response_bytes(response.content)
        )

    # -------------------------------------------------------------------------
    async def fetch_artifacts(self, job_id: str) -> dict[str, Any] | list[Any]:
        response = await self.get(self.job_url(JOB_ARTIFACTS_ENDPOINT, job_id))
        return decode_json_response_bytes(response.content)

    # -------------------------------------------------------------------------
    async def fetch_top_candidates(self, job_id: str) -> list[dict[str, Any]]:
        response = await self.get(self.job_url(JOB_CANDIDATES_ENDPOINT, job_id))
        return parse_candidates_csv(decode_response_text(response.content))

    # -------------------------------------------------------------------------
    async def load_results(self, job_id: str) -> JobResults:
        try:
            figures, artifacts, candidates = await asyncio.gather(
                self.fetch_figures(job_id),
                self.fetch_artifacts(job_id),
                self.fetch_top_candidates(job_id),
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching results of job %s: %s", job_id, exc)
            raise ResultsError(RESULTS_LOAD_FAILED_MESSAGE) from exc

        logger.info(
            "Loaded results of job %s: %d candidates", job_id, len(candidates)
        )
        return JobResults(
            job_id=job_id, figures=figures, artifacts=artifacts, candidates=candidates
        )

    # -------------------------------------------------------------------------
    async def download_bundle(self, job_id: str, target: LocalDelivery) -> str:
        filename = JOB_BUNDLE_FILENAME_TEMPLATE.format(job_id=job_id)
        try:
            response = await self.get(self.job_url(JOB_DOWNLOAD_ENDPOINT, job_id))
            path = target.save(filename, response.content)
        except (httpx.HTTPError, OSError) as exc:
            logger.error("Download of job %s bundle failed: %s", job_id, exc)
            raise ResultsError(RESULTS_DOWNLOAD_FAILED_MESSAGE) from exc
        logger.info("Saved job %s bundle to %s", job_id, path)
        return path
