"""Relay service for mailbox polling and notification."""

from .daemon import RelayService
from .relay import EmailRelay

__all__ = [
    "EmailRelay",
    "RelayService",
]
