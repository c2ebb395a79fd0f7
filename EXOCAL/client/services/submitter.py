from __future__ import annotations

import json

import httpx
from pydantic import ValidationError as SchemaValidationError

from EXOCAL.client.common.constants import (
    CONNECTION_FAILURE_MESSAGE,
    ENDPOINT_NOT_FOUND_MESSAGE,
    HTML_ERROR_MESSAGE,
    MALFORMED_SUBMISSION_MESSAGE,
    SERVER_FAILURE_MESSAGE,
    SUBMISSION_FALLBACK_MESSAGE,
    UPLOAD_ENDPOINT,
)
from EXOCAL.client.common.exceptions import SubmissionError
from EXOCAL.client.common.utils.encoding import (
    decode_json_response_bytes,
    decode_response_text,
    normalize_error_text,
)
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.entities.jobs import Job
from EXOCAL.client.schemas.jobs import UploadResponse
from EXOCAL.client.services.payload import UploadPayload


# -------------------------------------------------------------------------
def resolve_endpoint(base_url: str, endpoint: str) -> str:
    if endpoint.startswith(("http://", "https://")):
        return endpoint
    base = base_url.rstrip("/")
    if not endpoint.startswith("/"):
        endpoint = f"/{endpoint}"
    return f"{base}{endpoint}"


# -------------------------------------------------------------------------
def describe_error_body(response: httpx.Response) -> str | None:
    text = decode_response_text(response.content).strip()
    if not text:
        return None
    if "<html" in text.lower():
        return HTML_ERROR_MESSAGE
    try:
        payload = decode_json_response_bytes(response.content)
    except (json.JSONDecodeError, ValueError):
        return normalize_error_text(text)
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return normalize_error_text(value)
        return None
    if isinstance(payload, str) and payload.strip():
        return normalize_error_text(payload)
    return None


# -------------------------------------------------------------------------
def classify_submission_error(exc: httpx.HTTPError) -> SubmissionError:
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if status_code == 404:
            return SubmissionError(ENDPOINT_NOT_FOUND_MESSAGE, status_code)
        if status_code >= 500:
            return SubmissionError(SERVER_FAILURE_MESSAGE, status_code)
        message = describe_error_body(exc.response)
        return SubmissionError(message or SUBMISSION_FALLBACK_MESSAGE, status_code)
    if isinstance(exc, httpx.TransportError):
        return SubmissionError(CONNECTION_FAILURE_MESSAGE)
    message = normalize_error_text(str(exc)) if str(exc) else ""
    return SubmissionError(message or SUBMISSION_FALLBACK_MESSAGE)


###############################################################################
class JobSubmitter:
    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.upload_url = f"{self.base_url}{UPLOAD_ENDPOINT}"

    # -------------------------------------------------------------------------
    async def submit(self, payload: UploadPayload) -> Job:
        logger.info(
            "Submitting %s to %s (params=%s)",
            ", ".join(payload.field_names),
            self.upload_url,
            payload.params,
        )
        try:
            response = await self.client.post(
                self.upload_url, params=payload.params, files=payload.parts
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = classify_submission_error(exc)
            logger.error("Submission failed: %s (%s)", error, exc)
            raise error from exc

        try:
            data = UploadResponse.model_validate(
                decode_json_response_bytes(response.content)
            )
        except (json.JSONDecodeError, SchemaValidationError, ValueError) as exc:
            logger.error("Malformed submission response: %s", exc)
            raise SubmissionError(
                MALFORMED_SUBMISSION_MESSAGE, response.status_code
            ) from exc

        job = Job(
            id=data.job_id,
            status_url=resolve_endpoint(self.base_url, data.status_url),
            download_url=resolve_endpoint(self.base_url, data.download_url),
        )
        logger.info("Job %s accepted, polling %s", job.id, job.status_url)
        return job
