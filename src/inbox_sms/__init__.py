"""inbox-sms: relay important email to SMS."""

__version__ = "0.1.0"
