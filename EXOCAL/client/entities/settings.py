from __future__ import annotations

from dataclasses import dataclass


###############################################################################
@dataclass(frozen=True)
class ServiceSettings:
    base_url: str
    request_timeout: float
    health_timeout: float
    health_check_on_startup: bool


###############################################################################
@dataclass(frozen=True)
class PollingSettings:
    interval: float
    max_attempts: int | None


###############################################################################
@dataclass(frozen=True)
class SubmissionSettings:
    limit_targets: int
    seed: int


###############################################################################
@dataclass(frozen=True)
class DeliverySettings:
    output_dir: str
    filename: str
    fallback_navigation: bool


###############################################################################
@dataclass(frozen=True)
class ClientSettings:
    service: ServiceSettings
    polling: PollingSettings
    submission: SubmissionSettings
    delivery: DeliverySettings
