"""Subscriber storage module."""

from .models import Subscriber
from .subscriptions import SubscriptionStore

__all__ = ["Subscriber", "SubscriptionStore"]
