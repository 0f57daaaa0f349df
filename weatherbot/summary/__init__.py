"""Verbal forecast module."""

from .generator import SummaryGenerator, build_prompt

__all__ = ["SummaryGenerator", "build_prompt"]
