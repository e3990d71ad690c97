"""Utility modules for message text handling."""

from inbox_sms.utils.text import (
    clean_for_summary,
    first_lines,
    flatten,
    sender_display_name,
    smart_truncate,
)

__all__ = [
    "clean_for_summary",
    "first_lines",
    "flatten",
    "sender_display_name",
    "smart_truncate",
]
