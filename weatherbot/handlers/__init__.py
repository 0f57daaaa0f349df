"""Telegram bot handlers module."""

from .commands import CommandHandlers

__all__ = ["CommandHandlers"]
