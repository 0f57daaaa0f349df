"""Shared test fixtures."""

import json
from types import SimpleNamespace
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from weatherbot.config import HOURLY_VARIABLES
from weatherbot.weather import ForecastPayload, ForecastRequest


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status: int = 200, body: Any = None, text: Optional[str] = None):
        self.status = status
        self._body = body
        self._text = text if text is not None else json.dumps(body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self) -> str:
        return self._text

    async def json(self, content_type=None):
        return json.loads(self._text)


class FakeSession:
    """Records requests and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses):
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    async def close(self):
        self.closed = True


def make_response_body(hours: int = 5, **overrides) -> dict:
    """An Open-Meteo style response with `hours` hourly steps."""
    hourly = {
        "time": [f"2024-05-01T{8 + i:02d}:00" for i in range(hours)],
        "temperature_2m": [12.0 + i for i in range(hours)],
        "precipitation_probability": [10 * i for i in range(hours)],
        "rain": [0.0, 0.2, 0.5, 0.1, 0.0][:hours] + [0.0] * max(0, hours - 5),
        "showers": [0.0] * hours,
        "snowfall": [0.0] * hours,
        "cloud_cover": [20 + 5 * i for i in range(hours)],
        "wind_speed_10m": [5.0 + i for i in range(hours)],
    }
    hourly.update(overrides)
    return {
        "latitude": 51.3,
        "longitude": 12.38,
        "timezone": "Europe/Berlin",
        "hourly_units": {
            "time": "iso8601",
            "temperature_2m": "°C",
            "precipitation_probability": "%",
            "rain": "mm",
            "showers": "mm",
            "snowfall": "cm",
            "cloud_cover": "%",
            "wind_speed_10m": "km/h",
        },
        "hourly": hourly,
    }


@pytest.fixture
def forecast_request() -> ForecastRequest:
    return ForecastRequest(
        latitude=51.3079,
        longitude=12.3761,
        timezone="Europe/Berlin",
        forecast_days=1,
        forecast_hours=12,
        hourly_variables=HOURLY_VARIABLES,
    )


@pytest.fixture
def response_body() -> dict:
    return make_response_body()


@pytest.fixture
def payload(response_body) -> ForecastPayload:
    return ForecastPayload.from_response(response_body, HOURLY_VARIABLES)


@pytest.fixture
def telegram_bot() -> AsyncMock:
    bot = AsyncMock()
    bot.send_media_group = AsyncMock(return_value=[])
    bot.send_message = AsyncMock()
    return bot


def make_update(chat_id: int = 100, user_id: int = 1, thread_id: Optional[int] = None):
    """A Telegram update carrying a command in a chat (and forum topic)."""
    message = SimpleNamespace(
        message_thread_id=thread_id,
        is_topic_message=thread_id is not None,
    )
    return SimpleNamespace(
        effective_message=message,
        effective_chat=SimpleNamespace(id=chat_id),
        effective_user=SimpleNamespace(id=user_id),
    )


def make_context():
    return SimpleNamespace(bot=AsyncMock())


@pytest.fixture
def mock_notifier() -> MagicMock:
    notifier = MagicMock()
    notifier.run_pipeline = AsyncMock()
    notifier.send_result = AsyncMock()
    return notifier
