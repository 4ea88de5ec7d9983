from __future__ import annotations

import logging
import os
from typing import Self

import httpx

from volare.ai.interface import ConnectivityProbe

logger = logging.getLogger(__name__)

PROBE_URL = os.environ.get(
    "VOLARE_CONNECTIVITY_URL", "https://www.gstatic.com/generate_204"
)
PROBE_TIMEOUT_SECONDS = 3.0


class HttpConnectivityProbe(ConnectivityProbe):
    """Online if a HEAD request to a well-known endpoint gets any answer."""

    def __init__(self, client: httpx.AsyncClient, url: str = PROBE_URL) -> None:
        self._client = client
        self._url = url

    @classmethod
    def create(cls, client: httpx.AsyncClient) -> Self:
        return cls(client)

    async def is_online(self) -> bool:
        try:
            await self._client.head(self._url, timeout=PROBE_TIMEOUT_SECONDS)
        except httpx.TransportError as exc:
            logger.info("Connectivity probe failed: %s", exc)
            return False
        return True
