"""
Verbal forecast generation via the OpenAI chat completions API.
"""

import aiohttp
import asyncio
import logging
from datetime import datetime
from typing import Optional

from ..errors import TransportError, DataShapeError
from ..weather.openmeteo import ForecastPayload
from ..weather.series import format_time_label

logger = logging.getLogger(__name__)

# Map data (http://www.openstreetmap.org/copyright)
OSM_ATTRIBUTION = "[Map data © OpenStreetMap contributors](http://www.openstreetmap.org/copyright)"
# Weather data, CC BY 4.0
OPEN_METEO_ATTRIBUTION = "[Weather data © Open-Meteo, licensed under CC BY 4.0](https://open-meteo.com/)"

PROMPT_TEMPLATE = (
    "Zeit: {time}, Ort: {suburb} Wetterbericht: {forecast}. "
    "Wandle diese Daten in einen verbalen Wetterbericht um, der die Veränderungen "
    "über die Zeit in unter 800 Zeichen zusammenfassend darstellt. "
    "Gib zum Schluss eine kurze Kleidungsempfehlung."
)


def build_prompt(payload: ForecastPayload, suburb: str, generated_at: datetime) -> str:
    """Deterministic prompt for one forecast."""
    return PROMPT_TEMPLATE.format(
        time=format_time_label(generated_at),
        suburb=suburb,
        forecast=payload.to_json(),
    )


def with_attribution(text: str) -> str:
    return f"{text}\n{OSM_ATTRIBUTION}\n{OPEN_METEO_ATTRIBUTION}"


class SummaryGenerator:
    """Turns a forecast payload into a short verbal report."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1"
    ):
        """
        Initialize the summary generator.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            base_url: API root, without trailing slash
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
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

    async def complete(self, prompt: str) -> str:
        """
        Send one single-turn prompt and return the reply text.

        Raises:
            TransportError: network failure or non-2xx status
            DataShapeError: the reply has no message content
        """
        session = await self._get_session()
        headers = {"Authorization": f"Bearer {self.api_key}"}
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            async with session.post(
                f"{self.base_url}/chat/completions", json=body, headers=headers
            ) as response:
                if response.status >= 300:
                    error_text = await response.text()
                    logger.error(f"OpenAI API error: {response.status} - {error_text[:200]}")
                    raise TransportError(
                        f"OpenAI returned HTTP {response.status}",
                        status=response.status,
                    )
                try:
                    data = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise DataShapeError(f"OpenAI returned invalid JSON: {e}") from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"OpenAI request failed: {e}")
            raise TransportError(f"OpenAI request failed: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise DataShapeError("OpenAI response has no message content") from e
        if not isinstance(content, str) or not content.strip():
            raise DataShapeError("OpenAI response has empty message content")
        return content.strip()

    async def summarize(
        self,
        payload: ForecastPayload,
        suburb: str,
        generated_at: datetime
    ) -> str:
        """
        Generate the verbal forecast with attribution lines appended.

        Failures propagate; there is no fallback text.
        """
        prompt = build_prompt(payload, suburb, generated_at)
        logger.debug(f"Requesting verbal forecast ({len(prompt)} chars prompt)")
        text = await self.complete(prompt)
        return with_attribution(text)
