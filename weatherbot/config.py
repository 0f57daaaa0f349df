"""
Configuration management for the forecast bot.
Secrets and overrides come from the environment (.env is loaded on import).
An optional TOML file (CONFIG_PATH) can override the non-secret defaults.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional, Any, Tuple

import pytz
import toml
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SUBSCRIPTIONS_PATH = "subscriptions.json"

# Hourly Open-Meteo variables, in request order
HOURLY_VARIABLES: Tuple[str, ...] = (
    "temperature_2m",
    "precipitation_probability",
    "rain",
    "showers",
    "snowfall",
    "cloud_cover",
    "wind_speed_10m",
)


def _int_or_none(v: Any) -> Optional[int]:
    if v is None:
        return None
    s = str(v).strip()
    if s.lstrip("-").isdigit():
        return int(s)
    return None


class Config:
    """
    Application configuration.
    Values are read from the environment at import time; set_runtime_config
    overwrites them from a parsed TOML mapping.
    """

    BOT_TOKEN: str = os.getenv("BOT_TOKEN") or os.getenv("TELEGRAM_BOT_TOKEN", "")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini"
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OWNER_ID: Optional[int] = _int_or_none(os.getenv("OWNER_ID"))
    TIMEZONE: str = os.getenv("TIMEZONE", "Europe/Berlin")
    DELIVERY_TIME: str = os.getenv("DELIVERY_TIME", "13:12")
    SUBSCRIPTIONS_PATH: str = os.getenv("SUBSCRIPTIONS_PATH", DEFAULT_SUBSCRIPTIONS_PATH)
    LOG_LEVEL: str = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()

    # Fixed forecast location and window
    LATITUDE: float = float(os.getenv("LATITUDE", "51.3079"))
    LONGITUDE: float = float(os.getenv("LONGITUDE", "12.3761"))
    FORECAST_DAYS: int = int(os.getenv("FORECAST_DAYS", "1"))
    FORECAST_HOURS: int = int(os.getenv("FORECAST_HOURS", "12"))

    @classmethod
    def set_runtime_config(cls, config: dict) -> None:
        """Overwrite config from a parsed TOML mapping."""
        if "openai_model" in config:
            cls.OPENAI_MODEL = str(config["openai_model"] or "gpt-4o-mini")
        if "openai_base_url" in config:
            cls.OPENAI_BASE_URL = str(config["openai_base_url"])
        if "owner_id" in config:
            cls.OWNER_ID = _int_or_none(config["owner_id"])
        if "timezone" in config:
            cls.TIMEZONE = str(config["timezone"] or "UTC")
        if "delivery_time" in config:
            cls.DELIVERY_TIME = str(config["delivery_time"])
        if "subscriptions_path" in config:
            cls.SUBSCRIPTIONS_PATH = str(config["subscriptions_path"] or DEFAULT_SUBSCRIPTIONS_PATH)
        if "log_level" in config:
            cls.LOG_LEVEL = (str(config["log_level"] or "INFO")).upper()
        if "latitude" in config:
            cls.LATITUDE = float(config["latitude"])
        if "longitude" in config:
            cls.LONGITUDE = float(config["longitude"])
        if "forecast_days" in config:
            cls.FORECAST_DAYS = int(config["forecast_days"])
        if "forecast_hours" in config:
            cls.FORECAST_HOURS = int(config["forecast_hours"])

    @classmethod
    def load_file(cls, path: str) -> None:
        """Apply overrides from a TOML file."""
        cls.set_runtime_config(toml.loads(Path(path).read_text(encoding="utf-8")))

    @classmethod
    def get_timezone(cls) -> pytz.timezone:
        """Get the configured timezone object."""
        try:
            return pytz.timezone(cls.TIMEZONE)
        except pytz.exceptions.UnknownTimeZoneError:
            logging.warning(f"Unknown timezone '{cls.TIMEZONE}', using UTC")
            return pytz.UTC

    @classmethod
    def delivery_time(cls) -> Tuple[int, int]:
        """Parse DELIVERY_TIME ("HH:MM") into (hour, minute)."""
        hour, _, minute = cls.DELIVERY_TIME.partition(":")
        h, m = int(hour), int(minute or 0)
        if not (0 <= h <= 23 and 0 <= m <= 59):
            raise ValueError(f"Invalid DELIVERY_TIME: {cls.DELIVERY_TIME}")
        return h, m

    @classmethod
    def forecast_request(cls):
        """Build the fixed forecast request from the current settings."""
        from .weather.openmeteo import ForecastRequest

        return ForecastRequest(
            latitude=cls.LATITUDE,
            longitude=cls.LONGITUDE,
            timezone=cls.TIMEZONE,
            forecast_days=cls.FORECAST_DAYS,
            forecast_hours=cls.FORECAST_HOURS,
            hourly_variables=HOURLY_VARIABLES,
        )

    @classmethod
    def validate(cls) -> List[str]:
        """
        Validate configuration and return list of errors.
        Returns empty list if configuration is valid.
        """
        errors = []

        if not cls.BOT_TOKEN:
            errors.append("BOT_TOKEN is required")

        if not cls.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY is required")

        if cls.OWNER_ID is None:
            errors.append("OWNER_ID must be a numeric Telegram user id")

        if cls.FORECAST_DAYS < 1 or cls.FORECAST_HOURS < 1:
            errors.append("FORECAST_DAYS and FORECAST_HOURS must be at least 1")

        try:
            cls.delivery_time()
        except ValueError:
            errors.append(f"DELIVERY_TIME must be HH:MM, got '{cls.DELIVERY_TIME}'")

        return errors

    @classmethod
    def setup_logging(cls) -> None:
        """Configure logging based on settings."""
        log_level = getattr(logging, cls.LOG_LEVEL, logging.INFO)

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[logging.StreamHandler()]
        )

        # Reduce noise from external libraries
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("telegram").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
        logging.getLogger("matplotlib").setLevel(logging.WARNING)

    @classmethod
    def ensure_data_dir(cls) -> None:
        """Ensure the directory holding the subscriber file exists."""
        Path(cls.SUBSCRIPTIONS_PATH).parent.mkdir(parents=True, exist_ok=True)


class ChartTheme:
    """Fixed dark chart theme."""

    WIDTH: int = 1600
    HEIGHT: int = 900
    DPI: int = 100

    BACKGROUND: str = "black"
    GRID: str = "gray"
    TICKS: str = "white"
    LEGEND_TEXT: str = "gray"

    # Positional palette, first line red, second green, third blue
    LINE_COLORS: Tuple[str, ...] = ("#ff0000", "#00ff00", "#0000ff")
    LINE_WIDTH: float = 2.0
