"""Error handling for errguard.

Provides the error taxonomy, typed errors, normalization and boundaries.
"""

from errguard.errors.boundary import BoundaryState, ErrorBoundary, FallbackView
from errguard.errors.manager import UNKNOWN_ERROR_MESSAGE, ErrorManager, classify_message
from errguard.errors.reporting import LoggingReporter, Reporter, report_if_needed
from errguard.errors.taxonomy import ErrorCategory, ErrorSeverity, NormalizedError
from errguard.errors.variants import AppError, ErrorKind

__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "NormalizedError",
    "AppError",
    "ErrorKind",
    "ErrorManager",
    "classify_message",
    "UNKNOWN_ERROR_MESSAGE",
    "ErrorBoundary",
    "BoundaryState",
    "FallbackView",
    "Reporter",
    "LoggingReporter",
    "report_if_needed",
]
