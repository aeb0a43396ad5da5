"""Error taxonomy - categories, severities and the normalized error record."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union


class ErrorSeverity(str, Enum):
    """Ordinal urgency of an error."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Classification used for routing and reporting decisions."""

    NETWORK = "network"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    SERVER = "server"
    CLIENT = "client"
    UNKNOWN = "unknown"


ErrorCode = Union[str, int]


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


@dataclass(frozen=True)
class NormalizedError:
    """A single, typed representation of any failure."""

    message: str
    severity: ErrorSeverity
    category: ErrorCategory
    code: Optional[ErrorCode] = None
    timestamp: str = field(default_factory=utc_timestamp)
    data: Any = None
    retry: bool = False
    stack: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("NormalizedError.message must not be empty")

    def with_message(self, message: str) -> "NormalizedError":
        """Return a copy with a different user-facing message."""
        return replace(self, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict representation with enum values as strings."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["severity"] = self.severity.value
        result["category"] = self.category.value
        return result
