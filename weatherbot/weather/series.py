"""
Reshapes the hourly forecast into chart-ready series.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from ..config import ChartTheme
from ..errors import DataShapeError
from .openmeteo import ForecastPayload

logger = logging.getLogger(__name__)

LABEL_FORMAT = "%d.%m.%Y, %H:%M"
LABEL_SUFFIX = "Uhr"


class ChartKind(str, Enum):
    SINGLE_LINE = "single-line"
    MULTI_LINE = "multi-line"


@dataclass(frozen=True)
class AxisBounds:
    """Forced y-axis limits. None leaves that side to auto-scaling."""
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None


PERCENT_BOUNDS = AxisBounds(0, 100)
NON_NEGATIVE_BOUNDS = AxisBounds(0, None)


@dataclass
class SeriesLine:
    name: str
    unit: str
    values: List[Optional[float]]
    color: str

    @property
    def label(self) -> str:
        return f"{self.name} ({self.unit})" if self.unit else self.name


@dataclass
class ChartSpec:
    """One chart: shared x labels, one or more lines, optional bounds."""
    kind: ChartKind
    title: str
    labels: List[str]
    series: List[SeriesLine]
    bounds: AxisBounds = field(default_factory=AxisBounds)


# Photo captions, in the order the charts are delivered
CAPTIONS = {
    "temperature": "Temperaturvorhersage",
    "precipitation_combined": "Niederschlagsvorhersage",
    "wind_speed": "Windgeschwindigkeit Vorhersage",
    "cloud_cover": "Bewölkung Vorhersage",
    "precipitation_probability": "Niederschlagswahrscheinlichkeit Vorhersage",
}


@dataclass
class ChartSet:
    """The five charts produced from one forecast."""
    temperature: ChartSpec
    precipitation_probability: ChartSpec
    precipitation_combined: ChartSpec
    cloud_cover: ChartSpec
    wind_speed: ChartSpec

    def in_delivery_order(self) -> List[Tuple[ChartSpec, str]]:
        return [(getattr(self, name), caption) for name, caption in CAPTIONS.items()]


def format_time_label(value: Union[str, datetime]) -> str:
    """
    Format a timestamp as "DD.MM.YYYY, HH:MM Uhr".

    Uses the calendar fields as written, no timezone conversion.

    Raises:
        DataShapeError: value is not an ISO-8601 timestamp
    """
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise DataShapeError(f"Invalid timestamp: {value!r}") from e
    return f"{moment.strftime(LABEL_FORMAT)} {LABEL_SUFFIX}"


def adjusted_bounds(
    values: Sequence[Optional[float]],
    requested: AxisBounds
) -> AxisBounds:
    """
    Decide whether a chart needs forced axis bounds.

    A flat series would auto-scale to a single-value axis, so when every
    value is the same the requested bounds are kept. Any variation leaves
    scaling to the renderer. Missing values are ignored.
    """
    present = {float(v) for v in values if v is not None}
    if len(present) <= 1:
        return requested
    return AxisBounds()


def _line(
    payload: ForecastPayload,
    variable: str,
    name: str,
    color_index: int = 0
) -> SeriesLine:
    palette = ChartTheme.LINE_COLORS
    return SeriesLine(
        name=name,
        unit=payload.unit(variable),
        values=list(payload.series[variable]),
        color=palette[color_index % len(palette)],
    )


def _single(
    title: str,
    labels: List[str],
    line: SeriesLine,
    requested: Optional[AxisBounds] = None
) -> ChartSpec:
    bounds = adjusted_bounds(line.values, requested) if requested else AxisBounds()
    return ChartSpec(
        kind=ChartKind.SINGLE_LINE,
        title=title,
        labels=labels,
        series=[line],
        bounds=bounds,
    )


def to_chart_specs(payload: ForecastPayload) -> ChartSet:
    """
    Build the five chart specs from a forecast payload.

    Raises:
        DataShapeError: a required variable is missing or a timestamp
            cannot be parsed
    """
    required = (
        "temperature_2m", "precipitation_probability", "rain",
        "showers", "snowfall", "cloud_cover", "wind_speed_10m",
    )
    missing = [name for name in required if name not in payload.series]
    if missing:
        raise DataShapeError(f"Forecast lacks variables: {', '.join(missing)}")

    labels = [format_time_label(ts) for ts in payload.timestamps]

    precipitation_lines = [
        _line(payload, "rain", "Niederschlag [Regen]", 0),
        _line(payload, "showers", "Niederschlag [Schauer]", 1),
        _line(payload, "snowfall", "Niederschlag [Schnee]", 2),
    ]
    combined_values = [v for line in precipitation_lines for v in line.values]

    charts = ChartSet(
        temperature=_single(
            "Temperatur", labels,
            _line(payload, "temperature_2m", "Temperatur"),
        ),
        precipitation_probability=_single(
            "Niederschlagswahrscheinlichkeit", labels,
            _line(payload, "precipitation_probability", "Niederschlagswahrscheinlichkeit"),
            PERCENT_BOUNDS,
        ),
        precipitation_combined=ChartSpec(
            kind=ChartKind.MULTI_LINE,
            title="Niederschlag",
            labels=labels,
            series=precipitation_lines,
            bounds=adjusted_bounds(combined_values, NON_NEGATIVE_BOUNDS),
        ),
        cloud_cover=_single(
            "Bewölkung", labels,
            _line(payload, "cloud_cover", "Bewölkung"),
            PERCENT_BOUNDS,
        ),
        wind_speed=_single(
            "Windgeschwindigkeit", labels,
            _line(payload, "wind_speed_10m", "Windgeschwindigkeit"),
            NON_NEGATIVE_BOUNDS,
        ),
    )
    logger.debug(f"Built chart specs for {len(labels)} hourly steps")
    return charts
