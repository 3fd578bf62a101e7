"""
API endpoints.
"""

from . import health, google

__all__ = ["health", "google"]
