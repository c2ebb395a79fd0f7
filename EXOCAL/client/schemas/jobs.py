"""Pydantic schemas for the analysis service job payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


###############################################################################
class UploadResponse(BaseModel):
    job_id: str = Field(min_length=1)
    status_url: str = Field(min_length=1)
    download_url: str = Field(min_length=1)


###############################################################################
class JobProgressPayload(BaseModel):
    dataset: str | None = None
    percent: float = 0.0
    message: str | None = None
    last_target: str | int | float | None = None


###############################################################################
class JobStatusResponse(BaseModel):
    state: str | None = None
    progress: JobProgressPayload | None = None
    error: str | None = None

    # -------------------------------------------------------------------------
    @field_validator("state", mode="before")
    @classmethod
    def unrecognized_state(cls, value: Any) -> str | None:
        # non-string states are treated like unknown ones
        return value if isinstance(value, str) else None


###############################################################################
class DatasetFigures(BaseModel):
    summary: list[str] = Field(default_factory=list)
    targets: dict[str, list[str]] | list[Any] = Field(default_factory=list)


###############################################################################
class FiguresManifest(BaseModel):
    datasets: dict[str, DatasetFigures] = Field(default_factory=dict)
