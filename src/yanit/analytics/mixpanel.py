"""Mixpanel server-side event tracking over the HTTP ingestion API."""

import logging
import time
from typing import Any, Dict

import httpx

from yanit.interfaces.analytics import AnalyticsSink

logger = logging.getLogger(__name__)


class MixpanelSink(AnalyticsSink):
    """Posts events to Mixpanel's ``/track`` endpoint.

    Failures (transport errors or non-2xx replies) are logged and dropped;
    ``track`` never raises.

    Args:
        token: Mixpanel project token.
        endpoint: Ingestion URL (EU residency by default).
        timeout: Request timeout in seconds.
        distinct_id: Identity attached to server-side events.
        client: Pre-built ``httpx.AsyncClient``; one is created lazily otherwise.
    """

    def __init__(
        self,
        token: str,
        endpoint: str = "https://api-eu.mixpanel.com/track",
        timeout: float = 5.0,
        distinct_id: str = "backend-api",
        client: httpx.AsyncClient | None = None,
    ):
        if not token:
            raise ValueError("Mixpanel token must not be empty")
        self._token = token
        self._endpoint = endpoint
        self._timeout = timeout
        self._distinct_id = distinct_id
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def track(self, event: str, properties: Dict[str, Any]) -> None:
        payload = [
            {
                "event": event,
                "properties": {
                    "token": self._token,
                    "time": int(time.time()),
                    "distinct_id": self._distinct_id,
                    "source": "backend",
                    **properties,
                },
            }
        ]
        try:
            response = await self.client.post(
                self._endpoint,
                json=payload,
                headers={"Accept": "text/plain"},
            )
            if response.status_code >= 400:
                logger.warning(
                    "Mixpanel rejected event '%s': %d %s",
                    event,
                    response.status_code,
                    response.text[:200],
                )
            else:
                logger.debug("Mixpanel event '%s' sent", event)
        except httpx.HTTPError as e:
            logger.warning("Mixpanel request failed for '%s': %s", event, e)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
