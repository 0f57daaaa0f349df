"""Forecast, geocoding and series transformation module."""

from .openmeteo import OpenMeteoClient, ForecastRequest, ForecastPayload
from .nominatim import NominatimClient
from .series import (
    AxisBounds,
    ChartKind,
    ChartSet,
    ChartSpec,
    SeriesLine,
    adjusted_bounds,
    format_time_label,
    to_chart_specs,
)

__all__ = [
    "OpenMeteoClient",
    "ForecastRequest",
    "ForecastPayload",
    "NominatimClient",
    "AxisBounds",
    "ChartKind",
    "ChartSet",
    "ChartSpec",
    "SeriesLine",
    "adjusted_bounds",
    "format_time_label",
    "to_chart_specs",
]
