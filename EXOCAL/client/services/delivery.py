from __future__ import annotations

import os
import webbrowser
from collections.abc import Callable

import httpx

from EXOCAL.client.common.constants import RESULTS_FILENAME, RESULTS_PATH
from EXOCAL.client.common.exceptions import DeliveryError
from EXOCAL.client.common.utils.logger import logger
from EXOCAL.client.entities.jobs import DeliveryResult


###############################################################################
class LocalDelivery:
    """Materializes downloaded bundles in a local directory. Navigation opens
    the URL with the system browser."""

    def __init__(
        self,
        output_dir: str = RESULTS_PATH,
        opener: Callable[[str], bool] | None = None,
    ) -> None:
        self.output_dir = output_dir
        self.opener = opener or webbrowser.open

    # -------------------------------------------------------------------------
    def save(self, filename: str, content: bytes) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, filename)
        with open(path, "wb") as handle:
            handle.write(content)
        return path

    # -------------------------------------------------------------------------
    def navigate(self, url: str) -> bool:
        return bool(self.opener(url))


###############################################################################
class ResultFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        target: LocalDelivery,
        filename: str = RESULTS_FILENAME,
        fallback_navigation: bool = True,
    ) -> None:
        self.client = client
        self.target = target
        self.filename = filename
        self.fallback_navigation = fallback_navigation

    # -------------------------------------------------------------------------
    async def download(self, url: str) -> bytes:
        response = await self.client.get(url)
        response.raise_for_status()
        return response.content

    # -------------------------------------------------------------------------
    async def fetch_and_deliver(self, download_url: str) -> DeliveryResult:
        try:
            content = await self.download(download_url)
            path = self.target.save(self.filename, content)
        except (httpx.HTTPError, OSError) as exc:
            error = DeliveryError(f"Download failed: {exc}")
            logger.error("Result bundle download from %s failed: %s", download_url, exc)
            return self.navigate_fallback(download_url, error)

        logger.info("Saved %d bytes of results to %s", len(content), path)
        return DeliveryResult(delivered=True, location=path)

    # -------------------------------------------------------------------------
    def navigate_fallback(self, url: str, error: DeliveryError) -> DeliveryResult:
        if not self.fallback_navigation:
            return DeliveryResult(delivered=False, location=url, error=str(error))
        # Terminal fallback: its failure is logged, never raised.
        try:
            navigated = self.target.navigate(url)
        except webbrowser.Error as exc:
            logger.warning("Could not open %s: %s", url, exc)
            navigated = False
        if navigated:
            logger.info("Opened %s for direct download", url)
        else:
            logger.warning("Direct download of %s could not be started", url)
        return DeliveryResult(
            delivered=False, location=url, navigated=navigated, error=str(error)
        )
