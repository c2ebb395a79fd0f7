from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

from EXOCAL.client.common.constants import (
    DATASET_KINDS,
    DEFAULT_LIMIT_TARGETS,
    DEFAULT_SEED,
    MAX_LIMIT_TARGETS,
    MAX_SEED,
    MIN_LIMIT_TARGETS,
    MIN_SEED,
    QUERY_LIMIT_TARGETS,
    QUERY_SEED,
)
from EXOCAL.client.common.exceptions import ExocalError
from EXOCAL.client.common.utils.types import coerce_bounded_int


###############################################################################
class JobPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


###############################################################################
@dataclass(frozen=True)
class SelectedFile:
    filename: str
    path: str | None = None
    content: bytes | None = None

    # -------------------------------------------------------------------------
    @classmethod
    def from_path(cls, path: str) -> SelectedFile:
        return cls(filename=os.path.basename(path), path=path)

    # -------------------------------------------------------------------------
    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"Selected file {self.filename} has no content.")
        with open(self.path, "rb") as handle:
            return handle.read()


###############################################################################
@dataclass
class DatasetSlot:
    kind: str
    file: SelectedFile | None = None
    use_demo: bool = False

    # -------------------------------------------------------------------------
    def is_empty(self) -> bool:
        return self.file is None and not self.use_demo


###############################################################################
class InputSelection:
    """The three dataset slots. A slot holds either a file or the demo flag,
    never both."""

    def __init__(self) -> None:
        self.slots: dict[str, DatasetSlot] = {
            kind: DatasetSlot(kind=kind) for kind in DATASET_KINDS
        }

    # -------------------------------------------------------------------------
    def slot(self, kind: str) -> DatasetSlot:
        try:
            return self.slots[kind]
        except KeyError:
            raise ValueError(
                f"Unknown dataset kind '{kind}'. Valid: {list(DATASET_KINDS)}"
            ) from None

    # -------------------------------------------------------------------------
    def select_file(self, kind: str, selected: SelectedFile | str | None) -> None:
        slot = self.slot(kind)
        if isinstance(selected, str):
            selected = SelectedFile.from_path(selected)
        slot.file = selected
        if selected is not None:
            slot.use_demo = False

    # -------------------------------------------------------------------------
    def set_demo(self, kind: str, enabled: bool = True) -> None:
        slot = self.slot(kind)
        slot.use_demo = enabled
        if enabled:
            slot.file = None

    # -------------------------------------------------------------------------
    def clear(self, kind: str) -> None:
        slot = self.slot(kind)
        slot.file = None
        slot.use_demo = False

    # -------------------------------------------------------------------------
    def filled_slots(self) -> list[DatasetSlot]:
        return [self.slots[kind] for kind in DATASET_KINDS if not self.slots[kind].is_empty()]

    # -------------------------------------------------------------------------
    def is_empty(self) -> bool:
        return not self.filled_slots()


###############################################################################
@dataclass(frozen=True)
class SubmissionParameters:
    limit_targets: int = DEFAULT_LIMIT_TARGETS
    seed: int = DEFAULT_SEED

    # -------------------------------------------------------------------------
    @classmethod
    def from_user_input(
        cls,
        limit_targets: Any = None,
        seed: Any = None,
        default_limit_targets: int = DEFAULT_LIMIT_TARGETS,
        default_seed: int = DEFAULT_SEED,
    ) -> SubmissionParameters:
        return cls(
            limit_targets=coerce_bounded_int(
                limit_targets, default_limit_targets, MIN_LIMIT_TARGETS, MAX_LIMIT_TARGETS
            ),
            seed=coerce_bounded_int(seed, default_seed, MIN_SEED, MAX_SEED),
        )

    # -------------------------------------------------------------------------
    def to_query_params(self) -> dict[str, int]:
        return {QUERY_LIMIT_TARGETS: self.limit_targets, QUERY_SEED: self.seed}


###############################################################################
@dataclass(frozen=True)
class JobProgress:
    dataset: str
    percent: float
    message: str
    last_target: str | None = None


###############################################################################
@dataclass
class Job:
    id: str
    status_url: str
    download_url: str
    state: JobPhase = JobPhase.SUBMITTING
    progress: JobProgress | None = None
    error_message: str | None = None


###############################################################################
@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    location: str
    navigated: bool = False
    error: str | None = None


###############################################################################
@dataclass(frozen=True)
class JobSnapshot:
    state: JobPhase
    job_id: str | None = None
    progress: JobProgress | None = None
    error: ExocalError | None = None
    delivery: DeliveryResult | None = None

    # -------------------------------------------------------------------------
    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None

    # -------------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.state in (JobPhase.SUBMITTING, JobPhase.POLLING, JobPhase.FETCHING)

    # -------------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return self.state in (JobPhase.SUCCEEDED, JobPhase.FAILED)
