"""
Exception types raised across the forecast pipeline.
"""

from typing import Optional


class ForecastBotError(Exception):
    """Base class for all pipeline failures."""


class TransportError(ForecastBotError):
    """Network or HTTP failure talking to an external API."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DataShapeError(ForecastBotError):
    """An external API answered with missing or unexpected fields."""


class DeliveryError(ForecastBotError):
    """Sending the forecast to one subscriber failed."""

    def __init__(self, message: str, subscriber=None):
        super().__init__(message)
        self.subscriber = subscriber


class PersistenceError(ForecastBotError):
    """The subscriber file could not be written."""
