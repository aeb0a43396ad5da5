"""Typed application errors.

A single raisable ``AppError`` carries a ``kind`` discriminant plus the
payload that kind needs. Two tables drive its behaviour:

- ``VARIANT_DEFAULTS``: category, severity, retry flag, fallback message and
  code for each kind
- ``USER_MESSAGES``: the user-facing copy for each kind, computed only from
  the error's own fields
"""

import json
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from errguard.errors.taxonomy import ErrorCategory, ErrorCode, ErrorSeverity, utc_timestamp


class ErrorKind(str, Enum):
    """Discriminant for the closed set of application error variants."""

    GENERIC = "generic"
    NETWORK = "network"
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    SESSION_EXPIRED = "session_expired"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    SERVER = "server"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"


@dataclass(frozen=True)
class VariantDefaults:
    """Values a variant takes when the caller does not supply them."""

    category: ErrorCategory
    severity: ErrorSeverity
    retry: bool
    message: str
    code: Optional[ErrorCode] = None


VARIANT_DEFAULTS: dict[ErrorKind, VariantDefaults] = {
    ErrorKind.GENERIC: VariantDefaults(
        ErrorCategory.UNKNOWN, ErrorSeverity.MEDIUM, False, "An error occurred"
    ),
    ErrorKind.NETWORK: VariantDefaults(
        ErrorCategory.NETWORK, ErrorSeverity.HIGH, True, "Network connection issue"
    ),
    ErrorKind.TIMEOUT: VariantDefaults(
        ErrorCategory.NETWORK, ErrorSeverity.MEDIUM, True, "Request timed out"
    ),
    ErrorKind.AUTHENTICATION: VariantDefaults(
        ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH, True, "Authentication failed"
    ),
    ErrorKind.SESSION_EXPIRED: VariantDefaults(
        ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH, True, "Session expired"
    ),
    ErrorKind.AUTHORIZATION: VariantDefaults(
        ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, False, "Not authorized"
    ),
    ErrorKind.VALIDATION: VariantDefaults(
        ErrorCategory.VALIDATION, ErrorSeverity.MEDIUM, True, "Validation failed"
    ),
    ErrorKind.SERVER: VariantDefaults(
        ErrorCategory.SERVER, ErrorSeverity.HIGH, True, "Server error occurred"
    ),
    ErrorKind.NOT_FOUND: VariantDefaults(
        ErrorCategory.SERVER, ErrorSeverity.MEDIUM, False, "Resource not found", code=404
    ),
    ErrorKind.RATE_LIMIT: VariantDefaults(
        ErrorCategory.SERVER, ErrorSeverity.MEDIUM, True, "Rate limit exceeded", code=429
    ),
}

SERVER_FAMILY = frozenset({ErrorKind.SERVER, ErrorKind.NOT_FOUND, ErrorKind.RATE_LIMIT})

VALIDATION_SUMMARY = "Please review the form for errors and try again."


class AppError(Exception):
    """Base exception for errguard typed errors."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        kind: ErrorKind = ErrorKind.GENERIC,
        category: Optional[ErrorCategory] = None,
        severity: Optional[ErrorSeverity] = None,
        code: Optional[ErrorCode] = None,
        data: Any = None,
        retry: Optional[bool] = None,
        field_errors: Optional[dict[str, list[str]]] = None,
        retry_after: Optional[int] = None,
    ):
        defaults = VARIANT_DEFAULTS[kind]
        self.kind = kind
        self.message = message or defaults.message
        self.category = category or defaults.category
        self.severity = severity or defaults.severity
        self.code = code if code is not None else defaults.code
        self.data = data
        self.retry = defaults.retry if retry is None else retry
        self.field_errors: dict[str, list[str]] = dict(field_errors or {})
        self.retry_after = retry_after
        self.timestamp = utc_timestamp()
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r}, code={self.code!r})"

    # -- constructors -------------------------------------------------------

    @classmethod
    def network(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.NETWORK, **kwargs)

    @classmethod
    def timeout(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.TIMEOUT, **kwargs)

    @classmethod
    def authentication(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.AUTHENTICATION, **kwargs)

    @classmethod
    def session_expired(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.SESSION_EXPIRED, **kwargs)

    @classmethod
    def authorization(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.AUTHORIZATION, **kwargs)

    @classmethod
    def validation(
        cls,
        message: Optional[str] = None,
        field_errors: Optional[dict[str, list[str]]] = None,
        **kwargs: Any,
    ) -> "AppError":
        return cls(message, kind=ErrorKind.VALIDATION, field_errors=field_errors, **kwargs)

    @classmethod
    def server(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.SERVER, **kwargs)

    @classmethod
    def not_found(cls, message: Optional[str] = None, **kwargs: Any) -> "AppError":
        return cls(message, kind=ErrorKind.NOT_FOUND, **kwargs)

    @classmethod
    def rate_limit(
        cls,
        message: Optional[str] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ) -> "AppError":
        return cls(message, kind=ErrorKind.RATE_LIMIT, retry_after=retry_after, **kwargs)

    # -- behaviour ----------------------------------------------------------

    @property
    def is_server_family(self) -> bool:
        """Server, not-found and rate-limit errors share the server family."""
        return self.kind in SERVER_FAMILY

    def user_message(self, detailed_validation: bool = True) -> str:
        """Message safe to show to the user.

        With ``detailed_validation`` off, validation errors show the summary
        copy instead of the first field message.
        """
        if self.kind == ErrorKind.VALIDATION and not detailed_validation:
            return VALIDATION_SUMMARY
        return USER_MESSAGES[self.kind](self)

    def can_retry(self) -> bool:
        return self.retry is True

    def stack_text(self) -> str:
        """Formatted traceback, or just the exception line if never raised."""
        return "".join(traceback.format_exception(type(self), self, self.__traceback__))

    def log_message(self) -> str:
        """Format the error as a JSON document for logging."""
        return json.dumps(
            {
                "name": type(self).__name__,
                "kind": self.kind.value,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "code": self.code,
                "timestamp": self.timestamp,
                "stack": self.stack_text(),
            },
            indent=2,
            default=str,
        )

    # -- validation payload -------------------------------------------------

    def all_messages(self) -> list[str]:
        """All field errors as ``field: message`` lines, or the message itself."""
        messages = [
            f"{name}: {error}" for name, errors in self.field_errors.items() for error in errors
        ]
        return messages or [self.message]

    def has_field_error(self, name: str) -> bool:
        return bool(self.field_errors.get(name))

    def field_errors_for(self, name: str) -> list[str]:
        return list(self.field_errors.get(name, []))


def _validation_message(error: AppError) -> str:
    if error.field_errors:
        first_errors = next(iter(error.field_errors.values()))
        return (first_errors[0] if first_errors else "") or error.message
    return VALIDATION_SUMMARY


def _rate_limit_message(error: AppError) -> str:
    if error.retry_after:
        return f"Request limit reached. Please try again in {error.retry_after} seconds."
    return "Request limit reached. Please try again later."


def _fixed(text: str) -> Callable[[AppError], str]:
    return lambda _error: text


USER_MESSAGES: dict[ErrorKind, Callable[[AppError], str]] = {
    ErrorKind.GENERIC: lambda error: error.message,
    ErrorKind.NETWORK: _fixed(
        "There was a problem connecting to the server. "
        "Please check your internet connection and try again."
    ),
    ErrorKind.TIMEOUT: _fixed(
        "The request is taking longer than expected. Please try again later."
    ),
    ErrorKind.AUTHENTICATION: _fixed(
        "Authentication failed. Please check your credentials and try again."
    ),
    ErrorKind.SESSION_EXPIRED: _fixed("Your session has expired. Please log in again."),
    ErrorKind.AUTHORIZATION: _fixed("You do not have permission to access this resource."),
    ErrorKind.VALIDATION: _validation_message,
    ErrorKind.SERVER: _fixed("An unexpected server error occurred. Our team has been notified."),
    ErrorKind.NOT_FOUND: _fixed("The requested resource was not found."),
    ErrorKind.RATE_LIMIT: _rate_limit_message,
}
