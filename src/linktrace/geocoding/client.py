"""
Reverse geocoding client.

Turns latitude/longitude into a human-readable display name through a
Nominatim-compatible HTTP endpoint. The service is treated as unreliable:
every failure surfaces as EnrichmentError so callers can drop the address
and carry on.
"""

import logging
from typing import Optional, Protocol

import httpx

from linktrace.common.constants import GeocodingConstants
from linktrace.common.exceptions import EnrichmentError

logger = logging.getLogger(__name__)


class ReverseGeocoder(Protocol):
    """Anything that can resolve coordinates to an address."""

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        ...

    async def aclose(self) -> None:
        ...


class NominatimGeocoder:
    """
    Async client for the Nominatim ``/reverse`` endpoint.

    Nominatim's usage policy requires an identifying User-Agent, so one is
    always sent.
    """

    PROVIDER = "nominatim"

    def __init__(
        self,
        base_url: str = GeocodingConstants.NOMINATIM_REVERSE_URL,
        user_agent: str = GeocodingConstants.DEFAULT_USER_AGENT,
        timeout: float = GeocodingConstants.TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the geocoder.

        Args:
            base_url: Full URL of the reverse endpoint
            user_agent: Identifying User-Agent header value
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

        # HTTP client (lazy initialization)
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Resolve coordinates to a display name.

        Returns:
            The ``display_name`` of the result, or None when the service
            has no match for the coordinates.

        Raises:
            EnrichmentError: On transport errors, error statuses or a body
                that is not a JSON object.
        """
        client = await self._get_client()
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": GeocodingConstants.RESPONSE_FORMAT,
        }

        try:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise EnrichmentError(
                f"Reverse geocoding request failed: {e}",
                provider=self.PROVIDER,
                details={"latitude": latitude, "longitude": longitude},
            ) from e
        except ValueError as e:
            raise EnrichmentError(
                "Reverse geocoding returned malformed JSON",
                provider=self.PROVIDER,
            ) from e

        if not isinstance(payload, dict):
            raise EnrichmentError(
                f"Unexpected reverse geocoding payload: {type(payload).__name__}",
                provider=self.PROVIDER,
            )

        display_name = payload.get("display_name")
        if not display_name:
            # Nominatim answers {"error": "Unable to geocode"} with 200
            logger.debug(f"No address for ({latitude}, {longitude}): {payload.get('error')}")
            return None
        return str(display_name)
