"""Email source connectors."""

from .base import EmailSource
from .gmail import GmailSource

__all__ = [
    "EmailSource",
    "GmailSource",
]
