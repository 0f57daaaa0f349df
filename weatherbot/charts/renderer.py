"""
Chart rendering with matplotlib.
Draws forecast series on a fixed-size dark canvas and returns PNG bytes.
"""

import io
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
from matplotlib.figure import Figure
from scipy.interpolate import PchipInterpolator

from ..config import ChartTheme
from ..weather.series import ChartSet, ChartSpec, SeriesLine

logger = logging.getLogger(__name__)

# Interpolated points drawn between two hourly values
SMOOTH_SAMPLES = 12


@dataclass
class RenderedImage:
    data: bytes
    caption: str = ""


def _runs(values: Sequence[Optional[float]]) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """Yield (x, y) for each contiguous stretch of non-null values."""
    xs: List[int] = []
    ys: List[float] = []
    for i, v in enumerate(values):
        if v is None:
            if xs:
                yield np.array(xs, dtype=float), np.array(ys, dtype=float)
                xs, ys = [], []
            continue
        xs.append(i)
        ys.append(float(v))
    if xs:
        yield np.array(xs, dtype=float), np.array(ys, dtype=float)


def _smooth(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Monotone cubic interpolation; never overshoots the data."""
    if len(x) < 2:
        return x, y
    dense = np.linspace(x[0], x[-1], (len(x) - 1) * SMOOTH_SAMPLES + 1)
    return dense, PchipInterpolator(x, y)(dense)


class ChartRenderer:
    """
    Renders ChartSpecs to PNG.

    Uses the matplotlib object API only, so no global pyplot state is
    shared between calls.
    """

    def __init__(self, theme: type = ChartTheme):
        self.theme = theme

    def _new_figure(self) -> Figure:
        t = self.theme
        return Figure(
            figsize=(t.WIDTH / t.DPI, t.HEIGHT / t.DPI),
            dpi=t.DPI,
            facecolor=t.BACKGROUND,
        )

    def _style_axes(self, ax) -> None:
        t = self.theme
        ax.set_facecolor(t.BACKGROUND)
        ax.grid(True, color=t.GRID, linewidth=0.6)
        ax.tick_params(colors=t.TICKS, which="both")
        for spine in ax.spines.values():
            spine.set_color(t.GRID)

    def _draw_line(self, ax, line: SeriesLine) -> None:
        labelled = False
        for x, y in _runs(line.values):
            sx, sy = _smooth(x, y)
            ax.plot(
                sx, sy,
                color=line.color,
                linewidth=self.theme.LINE_WIDTH,
                label=None if labelled else line.label,
            )
            ax.plot(x, y, linestyle="none", marker="o", markersize=4, color=line.color)
            labelled = True
        if not labelled:
            # keep a legend entry for an all-null series
            ax.plot([], [], color=line.color, label=line.label)

    def draw(self, spec: ChartSpec) -> Figure:
        """Lay out a chart spec on a new themed figure."""
        t = self.theme
        fig = self._new_figure()
        ax = fig.add_subplot(1, 1, 1)
        self._style_axes(ax)

        for line in spec.series:
            self._draw_line(ax, line)

        if spec.labels:
            ax.set_xticks(range(len(spec.labels)))
            ax.set_xticklabels(spec.labels, rotation=45, ha="right")
            ax.set_xlim(-0.5, len(spec.labels) - 0.5)

        if spec.bounds.min is not None:
            ax.set_ylim(bottom=spec.bounds.min)
        if spec.bounds.max is not None:
            ax.set_ylim(top=spec.bounds.max)

        legend = ax.legend(facecolor=t.BACKGROUND, edgecolor=t.GRID)
        for text in legend.get_texts():
            text.set_color(t.LEGEND_TEXT)

        fig.tight_layout()
        return fig

    def render(self, spec: ChartSpec, caption: str = "") -> RenderedImage:
        """
        Render a chart spec to a PNG image.

        Args:
            spec: Labels, series and axis bounds
            caption: Caption attached to the resulting image

        Returns:
            Rendered image with PNG bytes
        """
        fig = self.draw(spec)
        buf = io.BytesIO()
        fig.savefig(buf, format="png", facecolor=fig.get_facecolor())
        buf.seek(0)
        logger.debug(f"Rendered chart '{spec.title}' ({spec.kind.value}, {len(spec.series)} lines)")
        return RenderedImage(data=buf.getvalue(), caption=caption)

    def render_all(self, charts: ChartSet) -> List[RenderedImage]:
        """Render every chart of a set in delivery order."""
        return [self.render(spec, caption) for spec, caption in charts.in_delivery_order()]
