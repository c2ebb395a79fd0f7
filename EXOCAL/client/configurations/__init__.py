from __future__ import annotations

from EXOCAL.client.configurations.base import (
    ensure_mapping,
    load_configurations,
)
from EXOCAL.client.configurations.client import (
    ClientSettings,
    DeliverySettings,
    PollingSettings,
    ServiceSettings,
    SubmissionSettings,
    client_settings,
    get_client_settings,
)

__all__ = [
    "ClientSettings",
    "DeliverySettings",
    "PollingSettings",
    "ServiceSettings",
    "SubmissionSettings",
    "client_settings",
    "get_client_settings",
    "ensure_mapping",
    "load_configurations",
]
