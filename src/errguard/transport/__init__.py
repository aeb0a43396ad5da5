"""HTTP transport helpers for errguard."""

from errguard.transport.client import ApiClient

__all__ = ["ApiClient"]
