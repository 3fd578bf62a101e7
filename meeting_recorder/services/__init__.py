"""
External services.
"""

from .webhook import StatusReporter, WebhookPayload

__all__ = ["StatusReporter", "WebhookPayload"]
