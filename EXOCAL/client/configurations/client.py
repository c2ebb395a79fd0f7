from __future__ import annotations

from typing import Any

from EXOCAL.client.configurations.base import ensure_mapping, load_configurations
from EXOCAL.client.common.constants import (
    CONFIGURATION_FILE,
    DEFAULT_HEALTH_TIMEOUT,
    DEFAULT_LIMIT_TARGETS,
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SEED,
    DEFAULT_SERVICE_URL,
    MAX_LIMIT_TARGETS,
    MAX_SEED,
    MIN_LIMIT_TARGETS,
    MIN_SEED,
    RESULTS_FILENAME,
    RESULTS_PATH,
)
from EXOCAL.client.common.utils.types import (
    coerce_bool,
    coerce_bounded_int,
    coerce_float,
    coerce_int_or_none,
    coerce_str,
    coerce_str_or_none,
)
from EXOCAL.client.common.utils.variables import env_variables
from EXOCAL.client.entities.settings import (
    ClientSettings,
    DeliverySettings,
    PollingSettings,
    ServiceSettings,
    SubmissionSettings,
)


# [BUILDER FUNCTIONS]
###############################################################################
def build_service_settings(payload: dict[str, Any] | Any) -> ServiceSettings:
    base_url = coerce_str_or_none(env_variables.get("EXOCAL_SERVICE_URL")) or coerce_str(
        payload.get("base_url"), DEFAULT_SERVICE_URL
    )
    request_timeout = coerce_float(
        env_variables.get("EXOCAL_REQUEST_TIMEOUT"),
        coerce_float(payload.get("request_timeout"), DEFAULT_REQUEST_TIMEOUT, minimum=0.1),
        minimum=0.1,
    )
    return ServiceSettings(
        base_url=base_url.rstrip("/"),
        request_timeout=request_timeout,
        health_timeout=coerce_float(
            payload.get("health_timeout"), DEFAULT_HEALTH_TIMEOUT, minimum=0.1
        ),
        health_check_on_startup=coerce_bool(
            payload.get("health_check_on_startup"), True
        ),
    )


# -------------------------------------------------------------------------
def build_polling_settings(payload: dict[str, Any] | Any) -> PollingSettings:
    return PollingSettings(
        interval=coerce_float(
            payload.get("interval"), DEFAULT_POLLING_INTERVAL, minimum=0.0
        ),
        max_attempts=coerce_int_or_none(payload.get("max_attempts"), minimum=1),
    )


# -------------------------------------------------------------------------
def build_submission_settings(payload: dict[str, Any] | Any) -> SubmissionSettings:
    return SubmissionSettings(
        limit_targets=coerce_bounded_int(
            payload.get("limit_targets"),
            DEFAULT_LIMIT_TARGETS,
            MIN_LIMIT_TARGETS,
            MAX_LIMIT_TARGETS,
        ),
        seed=coerce_bounded_int(payload.get("seed"), DEFAULT_SEED, MIN_SEED, MAX_SEED),
    )


# -------------------------------------------------------------------------
def build_delivery_settings(payload: dict[str, Any] | Any) -> DeliverySettings:
    output_dir = coerce_str_or_none(env_variables.get("EXOCAL_OUTPUT_DIR")) or coerce_str(
        payload.get("output_dir"), RESULTS_PATH
    )
    return DeliverySettings(
        output_dir=output_dir,
        filename=coerce_str(payload.get("filename"), RESULTS_FILENAME),
        fallback_navigation=coerce_bool(payload.get("fallback_navigation"), True),
    )


# -------------------------------------------------------------------------
def build_client_settings(payload: dict[str, Any] | Any) -> ClientSettings:
    return ClientSettings(
        service=build_service_settings(ensure_mapping(payload.get("service"))),
        polling=build_polling_settings(ensure_mapping(payload.get("polling"))),
        submission=build_submission_settings(
            ensure_mapping(payload.get("submission"))
        ),
        delivery=build_delivery_settings(ensure_mapping(payload.get("delivery"))),
    )


# [CLIENT CONFIGURATION LOADER]
###############################################################################
# -------------------------------------------------------------------------
def get_client_settings(config_path: str | None = None) -> ClientSettings:
    path = config_path or CONFIGURATION_FILE
    payload = load_configurations(path)

    return build_client_settings(payload)


client_settings = get_client_settings()
