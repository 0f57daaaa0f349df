"""Chart rendering module."""

from .renderer import ChartRenderer, RenderedImage

__all__ = ["ChartRenderer", "RenderedImage"]
