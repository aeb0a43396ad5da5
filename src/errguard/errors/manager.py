"""Error Manager - convert any raised value into a NormalizedError.

This module provides:
- Normalization of typed errors, exceptions, strings and arbitrary values
- Heuristic message classification for untyped exceptions
- HTTP status to typed error mapping (including httpx status errors)
- The report-worthiness predicate
"""

import logging
import traceback
from typing import Any, Callable, Optional

import httpx

from errguard.errors.taxonomy import (
    ErrorCategory,
    ErrorSeverity,
    NormalizedError,
    utc_timestamp,
)
from errguard.errors.variants import AppError, ErrorKind
from errguard.features.flags import (
    ENABLE_DETAILED_VALIDATION_ERRORS,
    ENABLE_ERROR_STACK_TRACES,
    FeaturePolicy,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"

# Message patterns for untyped exceptions - scanned in order, first match wins.
# The scan is a plain case-insensitive substring test and is known to be
# fragile for messages that mention several topics.
CLASSIFICATION_PATTERNS: list[dict[str, Any]] = [
    {
        "keywords": ("network", "fetch", "connection"),
        "category": ErrorCategory.NETWORK,
        "severity": ErrorSeverity.HIGH,
    },
    {
        "keywords": ("timeout", "timed out"),
        "category": ErrorCategory.NETWORK,
        "severity": ErrorSeverity.MEDIUM,
    },
    {
        "keywords": ("auth", "login", "permission"),
        "category": ErrorCategory.AUTHENTICATION,
        "severity": ErrorSeverity.HIGH,
        "retry": False,
    },
    {
        "keywords": ("validate", "invalid"),
        "category": ErrorCategory.VALIDATION,
        "severity": ErrorSeverity.LOW,
    },
    {
        "keywords": ("server", "500"),
        "category": ErrorCategory.SERVER,
        "severity": ErrorSeverity.HIGH,
    },
]

# Status code -> (constructor, default message)
HTTP_STATUS_MAP: dict[int, tuple[Callable[..., AppError], str]] = {
    400: (AppError.validation, "Bad Request"),
    401: (AppError.authentication, "Unauthorized"),
    403: (AppError.authorization, "Forbidden"),
    404: (AppError.not_found, "Not Found"),
    429: (AppError.rate_limit, "Too Many Requests"),
}


def classify_message(message: str) -> tuple[ErrorCategory, ErrorSeverity, bool]:
    """Classify an exception message into (category, severity, retry)."""
    lowered = message.lower()
    for pattern in CLASSIFICATION_PATTERNS:
        if any(keyword in lowered for keyword in pattern["keywords"]):
            return pattern["category"], pattern["severity"], pattern.get("retry", True)
    return ErrorCategory.UNKNOWN, ErrorSeverity.MEDIUM, True


def _safe_str(error: BaseException) -> str:
    try:
        return str(error)
    except Exception:
        logger.debug(f"Could not render message of {type(error).__name__}", exc_info=True)
        return ""


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class ErrorManager:
    """Centralized error normalization, classification and report gating.

    Create one per process and pass it to whatever needs it.
    """

    def __init__(self, policy: Optional[FeaturePolicy] = None, production: bool = False):
        self.policy = policy or FeaturePolicy()
        self.production = production

    @property
    def include_stack(self) -> bool:
        return self.policy.enabled(ENABLE_ERROR_STACK_TRACES)

    def handle(self, raw: Any) -> NormalizedError:
        """Normalize any raised value. Never raises."""
        if isinstance(raw, AppError):
            return self._format_app_error(raw)
        if isinstance(raw, BaseException):
            return self._handle_exception(raw)
        if isinstance(raw, str):
            return self._handle_string(raw)
        return self._handle_unknown(raw)

    def _format_app_error(self, error: AppError) -> NormalizedError:
        message = error.user_message(
            detailed_validation=self.policy.enabled(ENABLE_DETAILED_VALIDATION_ERRORS)
        )

        return NormalizedError(
            message=message or UNKNOWN_ERROR_MESSAGE,
            severity=error.severity,
            category=error.category,
            code=error.code,
            timestamp=error.timestamp,
            data=error.data,
            retry=error.can_retry(),
            stack=error.stack_text() if self.include_stack else None,
        )

    def _handle_exception(self, error: BaseException) -> NormalizedError:
        message = _safe_str(error)
        category, severity, retry = classify_message(message)
        logger.debug(f"Classified {type(error).__name__} as {category.value}/{severity.value}")

        return NormalizedError(
            message=message or UNKNOWN_ERROR_MESSAGE,
            severity=severity,
            category=category,
            timestamp=utc_timestamp(),
            retry=retry,
            stack=_format_stack(error) if self.include_stack else None,
        )

    def _handle_string(self, error: str) -> NormalizedError:
        return NormalizedError(
            message=error or UNKNOWN_ERROR_MESSAGE,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.UNKNOWN,
            timestamp=utc_timestamp(),
            retry=True,
        )

    def _handle_unknown(self, error: Any) -> NormalizedError:
        return NormalizedError(
            message=UNKNOWN_ERROR_MESSAGE,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.UNKNOWN,
            timestamp=utc_timestamp(),
            data=error,
            retry=True,
        )

    def create_from_http_status(
        self,
        status: int,
        message: Optional[str] = None,
        data: Any = None,
    ) -> AppError:
        """Create the typed error matching an HTTP status code."""
        if status in HTTP_STATUS_MAP:
            factory, default_message = HTTP_STATUS_MAP[status]
            return factory(message or default_message, code=status, data=data)
        if status >= 500:
            return AppError.server(message or "Server Error", code=status, data=data)
        return AppError(
            message or f"HTTP Error {status}",
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM,
            code=status,
            data=data,
        )

    def from_http_error(self, error: httpx.HTTPStatusError) -> AppError:
        """Convert an httpx status error into a typed error.

        The message comes from a string body, a JSON body's ``message`` key,
        or the exception text, in that order.
        """
        response = error.response
        try:
            payload: Any = response.json()
        except ValueError:
            payload = response.text
        except httpx.ResponseNotRead:
            payload = None

        if isinstance(payload, str) and payload:
            message = payload
        elif isinstance(payload, dict) and "message" in payload:
            message = str(payload["message"])
        else:
            message = str(error)

        typed = self.create_from_http_status(response.status_code, message, payload)
        if typed.kind == ErrorKind.RATE_LIMIT:
            retry_after = response.headers.get("retry-after")
            if retry_after and retry_after.isdigit():
                typed.retry_after = int(retry_after)
        return typed

    def should_report(self, error: NormalizedError) -> bool:
        """Decide whether an error is worth sending to monitoring."""
        if self.production:
            if error.category == ErrorCategory.VALIDATION:
                return False
            if error.code == 404:
                return False

        if error.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            return True

        if error.severity == ErrorSeverity.MEDIUM and error.category != ErrorCategory.VALIDATION:
            return True

        return False

    def retry_predicate(self) -> Callable[[Any, int], bool]:
        """Build a ``should_retry`` callback that retries transient failures only."""

        def should_retry(error: Any, attempt: int) -> bool:
            normalized = self.handle(error)
            logger.debug(
                f"Attempt {attempt} failed with {normalized.category.value} error "
                f"(retry={normalized.retry})"
            )
            return normalized.retry

        return should_retry
