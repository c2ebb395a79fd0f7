from __future__ import annotations

import httpx

from EXOCAL.client.common.constants import DEFAULT_HEALTH_TIMEOUT, HEALTH_ENDPOINT
from EXOCAL.client.common.utils.logger import logger


# -------------------------------------------------------------------------
async def check_service_health(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = DEFAULT_HEALTH_TIMEOUT,
) -> bool:
    """Probe the service liveness endpoint for diagnostics only. Never raises."""
    health_url = f"{base_url.rstrip('/')}{HEALTH_ENDPOINT}"
    logger.debug("Testing backend connection at %s", health_url)
    try:
        response = await client.get(health_url, timeout=timeout)
        response.raise_for_status()
    except httpx.ConnectError as exc:
        logger.warning("Backend health check failed, connection refused: %s", exc)
        return False
    except httpx.TimeoutException:
        logger.warning("Backend health check timed out after %.1fs", timeout)
        return False
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        if status_code == 404:
            logger.warning("Backend health endpoint not found at %s", health_url)
        elif status_code >= 500:
            logger.warning("Backend health check reported server error %s", status_code)
        else:
            logger.warning("Backend health check returned status %s", status_code)
        return False
    except httpx.HTTPError as exc:
        logger.warning("Backend health check failed: %s", exc)
        return False

    logger.info("Backend health check succeeded (status %s)", response.status_code)
    logger.debug("Health payload: %s", response.text[:500])
    return True
