"""Notification module for the forecast bot."""

from .notifier import Notifier, PipelineResult, DeliveryReport
from .templates import MessageTemplates

__all__ = ["Notifier", "PipelineResult", "DeliveryReport", "MessageTemplates"]
