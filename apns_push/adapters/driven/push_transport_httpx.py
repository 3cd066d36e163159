import logging
from typing import Mapping, Optional
from urllib.parse import urlsplit

import httpx

from apns_push.domain.entities import DeliveryOutcome
from apns_push.domain.errors import TransportError
from apns_push.domain.ports import PushTransport

logger = logging.getLogger(__name__)


def _host(url: str) -> str:
    # The path carries the device token; logs only get the host.
    try:
        return urlsplit(url).hostname or "<invalid url>"
    except ValueError:
        return "<invalid url>"


def _build_client(timeout: Optional[float]) -> httpx.AsyncClient:
    # http1=False: APNs only speaks HTTP/2, never downgrade.
    return httpx.AsyncClient(http1=False, http2=True, timeout=timeout)


class HttpxPushTransport(PushTransport):
    """
    HTTP/2 transport for the gateway.

    Used directly, every post opens and closes its own client. Used as an async
    context manager (or given a client), one multiplexed connection is shared by
    every post made inside the block.
    """

    def __init__(self, timeout: Optional[float] = 10.0, client: Optional[httpx.AsyncClient] = None):
        self._timeout = timeout
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> "HttpxPushTransport":
        if self._client is None:
            self._client = _build_client(self._timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    async def post(self, url: str, headers: Mapping[str, str], body: bytes) -> DeliveryOutcome:
        host = _host(url)
        try:
            if self._client is not None:
                response = await self._client.post(url, headers=dict(headers), content=body)
            else:
                async with _build_client(self._timeout) as client:
                    response = await client.post(url, headers=dict(headers), content=body)
        except httpx.TransportError as e:
            logger.warning("Transport failure posting to %s: %s", host, type(e).__name__)
            raise TransportError(f"{type(e).__name__}: {e}") from e
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # Header values and URLs must be ASCII before they reach the wire.
            logger.warning("Request to %s could not be built: %s", host, type(e).__name__)
            raise TransportError(f"Invalid request: {type(e).__name__}: {e}") from e

        logger.debug("Gateway answered %s (%s) from %s", response.status_code, response.http_version, host)
        return DeliveryOutcome(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )
