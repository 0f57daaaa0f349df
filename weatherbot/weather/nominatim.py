"""
Nominatim reverse geocoding client.
Resolves the fixed coordinate to a neighbourhood name for the summary text.
"""

import aiohttp
import asyncio
import logging
from typing import Optional

from ..errors import TransportError, DataShapeError

logger = logging.getLogger(__name__)


class NominatimClient:
    """Client for the OpenStreetMap Nominatim reverse endpoint."""

    BASE_URL = "https://nominatim.openstreetmap.org/reverse"
    # Nominatim rejects requests without an identifying agent
    USER_AGENT = "weatherbot/1.0 (daily forecast charts)"

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or self.BASE_URL
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.USER_AGENT}
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def resolve_suburb(self, latitude: float, longitude: float) -> str:
        """
        Reverse-geocode a coordinate to its suburb name.

        Args:
            latitude: Location latitude
            longitude: Location longitude

        Returns:
            Value of address.suburb

        Raises:
            TransportError: network failure or non-2xx status
            DataShapeError: the response has no address.suburb
        """
        session = await self._get_session()
        params = {"lat": latitude, "lon": longitude, "format": "json"}

        try:
            async with session.get(self.base_url, params=params) as response:
                if response.status >= 300:
                    logger.error(f"Nominatim API error: {response.status}")
                    raise TransportError(
                        f"Nominatim returned HTTP {response.status}",
                        status=response.status,
                    )
                try:
                    data = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise DataShapeError(f"Nominatim returned invalid JSON: {e}") from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Nominatim request failed: {e}")
            raise TransportError(f"Nominatim request failed: {e}") from e

        address = data.get("address") if isinstance(data, dict) else None
        suburb = address.get("suburb") if isinstance(address, dict) else None
        if not suburb:
            raise DataShapeError("Nominatim response has no address.suburb")
        return str(suburb)
