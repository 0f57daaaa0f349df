"""
Open-Meteo API client.
Fetches the hourly forecast for one fixed location.
"""

import aiohttp
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple

from ..errors import TransportError, DataShapeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastRequest:
    """
    Parameters of a forecast fetch.

    Attributes:
        latitude: Location latitude
            Example: 51.3079
        longitude: Location longitude
            Example: 12.3761
        timezone: IANA timezone the provider uses for the hourly timestamps
            Example: "Europe/Berlin"
        forecast_days: Number of forecast days
        forecast_hours: Number of hourly steps to return
        hourly_variables: Ordered Open-Meteo variable names
            Example: ("temperature_2m", "cloud_cover")
    """
    latitude: float
    longitude: float
    timezone: str
    forecast_days: int
    forecast_hours: int
    hourly_variables: Tuple[str, ...]

    def __post_init__(self):
        if self.forecast_days < 1 or self.forecast_hours < 1:
            raise ValueError("forecast_days and forecast_hours must be positive")
        if not self.hourly_variables:
            raise ValueError("at least one hourly variable is required")
        if len(set(self.hourly_variables)) != len(self.hourly_variables):
            raise ValueError("hourly variables must be unique")
        # Normalize lists passed by callers
        object.__setattr__(self, "hourly_variables", tuple(self.hourly_variables))

    def to_params(self) -> Dict[str, Any]:
        """Query parameters for the forecast endpoint."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "hourly": ",".join(self.hourly_variables),
            "timezone": self.timezone,
            "forecast_days": self.forecast_days,
            "forecast_hours": self.forecast_hours,
        }


@dataclass
class ForecastPayload:
    """Hourly series as returned by the provider."""
    timestamps: List[str]
    units: Dict[str, str]
    series: Dict[str, List[Optional[float]]]
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(
        cls,
        data: Any,
        variables: Tuple[str, ...]
    ) -> "ForecastPayload":
        """
        Validate a decoded response and build the payload.

        Raises:
            DataShapeError: a requested variable is missing or a series
                length does not match the timestamps
        """
        if not isinstance(data, dict):
            raise DataShapeError("Forecast response is not a JSON object")

        hourly = data.get("hourly")
        units = data.get("hourly_units")
        if not isinstance(hourly, dict) or not isinstance(units, dict):
            raise DataShapeError("Forecast response lacks 'hourly' or 'hourly_units'")

        timestamps = hourly.get("time")
        if not isinstance(timestamps, list):
            raise DataShapeError("Forecast response lacks 'hourly.time'")

        series = {}
        for name in variables:
            values = hourly.get(name)
            if not isinstance(values, list):
                raise DataShapeError(f"Forecast response lacks 'hourly.{name}'")
            if len(values) != len(timestamps):
                raise DataShapeError(
                    f"Series '{name}' has {len(values)} values for {len(timestamps)} timestamps"
                )
            series[name] = values

        return cls(
            timestamps=list(timestamps),
            units={name: str(units.get(name, "")) for name in variables},
            series=series,
            raw=data,
        )

    def unit(self, variable: str) -> str:
        return self.units.get(variable, "")

    def to_json(self) -> str:
        """Serialize the full provider payload (used in the summary prompt)."""
        return json.dumps(self.raw, ensure_ascii=False)


class OpenMeteoClient:
    """Client for the Open-Meteo forecast API."""

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(self, base_url: Optional[str] = None):
        """
        Initialize Open-Meteo client.

        Args:
            base_url: Override for the forecast endpoint
        """
        self.base_url = base_url or self.BASE_URL
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch_forecast(self, request: ForecastRequest) -> ForecastPayload:
        """
        Get the hourly forecast described by the request.

        One GET per call, no retry.

        Args:
            request: Location, window and variables to fetch

        Returns:
            Parsed forecast payload

        Raises:
            TransportError: network failure or non-2xx status
            DataShapeError: body is not the expected JSON document
        """
        session = await self._get_session()

        try:
            async with session.get(self.base_url, params=request.to_params()) as response:
                if response.status >= 300:
                    error_text = await response.text()
                    logger.error(
                        f"Open-Meteo API error: {response.status} - {error_text[:200]}"
                    )
                    raise TransportError(
                        f"Open-Meteo returned HTTP {response.status}",
                        status=response.status,
                    )
                try:
                    data = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise DataShapeError(f"Open-Meteo returned invalid JSON: {e}") from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Open-Meteo request failed: {e}")
            raise TransportError(f"Open-Meteo request failed: {e}") from e

        payload = ForecastPayload.from_response(data, request.hourly_variables)
        logger.debug(f"Fetched {len(payload.timestamps)} hourly steps from Open-Meteo")
        return payload
