"""Utility modules for errguard."""

from errguard.utils.decorators import ApiResponse, status_for, with_error_handling
from errguard.utils.retry import (
    RetryCancelledError,
    compute_delay_ms,
    retry_with_backoff,
    retry_with_backoff_sync,
)

__all__ = [
    "ApiResponse",
    "status_for",
    "with_error_handling",
    "RetryCancelledError",
    "compute_delay_ms",
    "retry_with_backoff",
    "retry_with_backoff_sync",
]
