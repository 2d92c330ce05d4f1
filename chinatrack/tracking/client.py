"""
Tracking status client for the TrackingMore v4 API.

Lookup flow:
1. Realtime lookup (POST /trackings/realtime). Any failure falls through.
2. Register the number (POST /trackings/create). Failures are only logged;
   "already exists" (meta.code 4016) is expected.
3. Fetch tracking info (GET /trackings/get). Failures raise TrackingLookupError.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..constants import (
    DEFAULT_TIMEOUT,
    META_CODE_ALREADY_EXISTS,
    TRACKINGMORE_API_KEY_HEADER,
    TRACKINGMORE_BASE_URL,
)
from ..errors import TrackingLookupError
from ..models import StatusUpdate
from .responses import ApiMeta, GetResponse, RealtimeResponse

logger = logging.getLogger(__name__)


class TrackingClient:
    """
    Fetches and normalizes shipment status from TrackingMore.

    One client per application. Pass ``http_client`` to share or fake the
    underlying httpx.AsyncClient; otherwise one is created on first use and
    closed by close().

    Example:
        async with TrackingClient(api_key="...") as client:
            update = await client.fetch_status("SF123", "sf-express")
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = TRACKINGMORE_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.api_base = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None

    async def __aenter__(self) -> "TrackingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {
            TRACKINGMORE_API_KEY_HEADER: self.api_key or "",
            "Accept": "application/json",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def fetch_status(self, tracking_number: str, carrier_code: str) -> StatusUpdate:
        """
        Look up the current status of a tracking number.

        Args:
            tracking_number: Carrier tracking number (whitespace is trimmed)
            carrier_code: TrackingMore carrier code, e.g. "sf-express"

        Returns:
            Normalized StatusUpdate

        Raises:
            TrackingLookupError: if the fallback lookup fails or finds nothing
        """
        if not self.api_key:
            logger.error("TrackingMore API key not configured")
            raise TrackingLookupError(
                "Tracking API key not configured. Set tracking.api_key in config."
            )

        number = tracking_number.strip()
        carrier = carrier_code.strip()
        logger.info(f"Fetching status for {number} ({carrier})")

        update = await self._realtime(number, carrier)
        if update is not None:
            return update

        await self._create(number, carrier)
        return await self._get(number, carrier)

    async def _realtime(self, number: str, carrier: str) -> Optional[StatusUpdate]:
        """Realtime lookup. Returns None on any failure so the caller falls back."""
        url = f"{self.api_base}/trackings/realtime"
        payload = {"tracking_number": number, "carrier_code": carrier}
        try:
            response = await self._client().post(
                url, headers=self._headers(with_body=True), json=payload, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"Realtime API network error for {number}, switching to fallback flow: {e}")
            return None

        if response.is_success:
            try:
                parsed = RealtimeResponse.from_body(response.json())
            except ValueError:
                parsed = None
            if parsed is not None and parsed.ok:
                return parsed.record.to_status_update()

        logger.warning(
            f"Realtime API attempt failed (status {response.status_code}) for {number}. "
            "Switching to fallback flow."
        )
        return None

    async def _create(self, number: str, carrier: str) -> None:
        """Register the number for tracking. Never raises."""
        url = f"{self.api_base}/trackings/create"
        payload = {"tracking_number": number, "carrier_code": carrier}
        try:
            response = await self._client().post(
                url, headers=self._headers(with_body=True), json=payload, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"Create step warning for {number}: {e}")
            return

        if response.is_success:
            return
        meta = ApiMeta.from_body(_json_or_empty(response))
        if meta.code != META_CODE_ALREADY_EXISTS:
            logger.warning(f"Create step warning for {number}: {meta.message or response.status_code}")

    async def _get(self, number: str, carrier: str) -> StatusUpdate:
        url = f"{self.api_base}/trackings/get"
        try:
            response = await self._client().get(
                url,
                headers=self._headers(),
                params={"tracking_numbers": number},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"TrackingMore get timed out for {number}: {e}")
            raise TrackingLookupError(
                "Tracking service timed out. Please try again later."
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"TrackingMore connection error for {number}: {e}", exc_info=True)
            raise TrackingLookupError(
                "Unable to check tracking status right now. Please try again in a few minutes."
            ) from e

        if not response.is_success:
            meta = ApiMeta.from_body(_json_or_empty(response))
            message = meta.message or f"API Error {response.status_code}"
            if "Page does not exist" in message:
                message = "Tracking service unavailable (Endpoint Error)."
            logger.error(f"TrackingMore get failed for {number}: {response.status_code} {message}")
            raise TrackingLookupError(message)

        record = GetResponse.from_body(_json_or_empty(response)).select(carrier)
        if record is None:
            raise TrackingLookupError("Tracking number not found in system.")
        return record.to_status_update()


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}
