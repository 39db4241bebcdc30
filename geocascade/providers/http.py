# Shared httpx plumbing for HTTP-backed geocoders.
# geocascade/providers/http.py
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Dict, Optional

import httpx

from ..core.errors import GeocoderUnavailableError
from .base import GeocodeStatus

logger = logging.getLogger(__name__)

# HTTP error codes that still carry a meaningful geocoding status.
HTTP_STATUS_MAP = {
    400: GeocodeStatus.INVALID_REQUEST,
    401: GeocodeStatus.REQUEST_DENIED,
    403: GeocodeStatus.REQUEST_DENIED,
    429: GeocodeStatus.TOO_MANY_REQUESTS,
}

# Retried, then raised as GeocoderUnavailableError; never a status.
TRANSIENT_STATUS_CODES = (500, 502, 503, 504)


def status_for_http_error(status_code: int) -> GeocodeStatus:
    return HTTP_STATUS_MAP.get(status_code, GeocodeStatus.ERROR)


class HttpGeocoder:
    """
    Owns an httpx.AsyncClient and retries transport failures and 5xx
    responses with exponential backoff + jitter.
    Other HTTP error responses are not retried; subclasses classify them.
    """

    geocoder_id = "http"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout_s: float = 10.0,
        max_retries: int = 2,
        base_backoff_s: float = 0.5,
    ):
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.base_backoff_s = base_backoff_s
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(f"{type(self).__name__} must be used with 'async with' or provide a client.")
        return self._client

    async def _get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        last_err: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                resp = await self.client.get(url, params=params, headers=headers)
                if resp.status_code in TRANSIENT_STATUS_CODES:
                    # provider-side outage, not an answer about the address
                    raise httpx.HTTPStatusError(
                        f"transient status {resp.status_code}",
                        request=resp.request,
                        response=resp,
                    )
                return resp
            except (httpx.TransportError, httpx.HTTPStatusError) as e:
                last_err = e
                if attempt >= self.max_retries:
                    break
                backoff = self.base_backoff_s * (2 ** attempt)
                jitter = random.random() * 0.25
                logger.warning(
                    "%s request failed (%s), retry %d/%d in %.2fs",
                    self.geocoder_id, e, attempt + 1, self.max_retries, backoff + jitter,
                )
                await asyncio.sleep(backoff + jitter)
        raise GeocoderUnavailableError(
            self.geocoder_id, f"request failed after retries: {last_err}", cause=last_err
        ) from last_err

    def _decode_json(self, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise GeocoderUnavailableError(self.geocoder_id, "response is not valid JSON", cause=e) from e
