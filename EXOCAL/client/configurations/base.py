from __future__ import annotations

import json
import os
from typing import Any

from EXOCAL.client.common.utils.logger import logger


# -------------------------------------------------------------------------
def ensure_mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}


# -------------------------------------------------------------------------
def load_configurations(path: str) -> dict[str, Any]:
    if not os.path.exists(path):
        logger.warning("Configuration file not found at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid configuration file {path}: {exc}") from exc
    return ensure_mapping(payload)
