"""Notification channels for relayed messages."""

from .base import NotificationError, Notifier
from .textbelt import TextBeltNotifier

__all__ = ["NotificationError", "Notifier", "TextBeltNotifier"]
