"""Error reporting sinks.

A reporter receives a NormalizedError plus a free-form context mapping. The
bundled ``LoggingReporter`` writes reports to the standard logging system,
enriched with breadcrumbs and user context. Reporters are fire-and-forget:
a failure inside a reporter is logged and never propagates to the caller.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from errguard.errors.manager import ErrorManager
from errguard.errors.taxonomy import ErrorSeverity, NormalizedError, utc_timestamp
from errguard.features.flags import ENABLE_ERROR_REPORTING, FeaturePolicy

logger = logging.getLogger(__name__)

SEVERITY_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class Reporter(Protocol):
    """Anything that can receive error reports."""

    def report(self, error: NormalizedError, context: dict[str, Any]) -> None: ...


@dataclass
class Breadcrumb:
    """A step recorded before an error, for diagnostic context."""

    message: str
    category: str = "user"
    level: str = "info"
    timestamp: str = field(default_factory=utc_timestamp)


class LoggingReporter:
    """Reporter that writes error reports to the ``errguard.monitoring`` logger."""

    def __init__(
        self,
        environment: str = "development",
        max_breadcrumbs: int = 50,
        log: Optional[logging.Logger] = None,
    ):
        self.environment = environment
        self.breadcrumbs: deque[Breadcrumb] = deque(maxlen=max_breadcrumbs)
        self.user_id: Optional[str] = None
        self.user_attributes: dict[str, Any] = {}
        self.reports_sent = 0
        self._log = log or logging.getLogger("errguard.monitoring")

    def report(self, error: NormalizedError, context: Optional[dict[str, Any]] = None) -> None:
        """Send an error report. Never raises."""
        try:
            payload = {
                "error": error.to_dict(),
                "context": dict(context or {}),
                "environment": self.environment,
                "timestamp": utc_timestamp(),
                "user": {"id": self.user_id, **self.user_attributes},
                "breadcrumbs": [crumb.message for crumb in self.breadcrumbs],
            }
            self._log.log(
                SEVERITY_LOG_LEVELS.get(error.severity, logging.ERROR),
                "[ERROR MONITORING] %s (%s/%s, code=%s)",
                error.message,
                error.category.value,
                error.severity.value,
                error.code,
                extra={"report": payload},
            )
            if self.environment != "production" and error.stack:
                self._log.debug("Stack: %s", error.stack)
            self.reports_sent += 1
        except Exception:
            logger.exception("Failed to report error")

    def add_breadcrumb(self, message: str, category: str = "user", level: str = "info") -> None:
        """Record a breadcrumb attached to later reports."""
        self.breadcrumbs.append(Breadcrumb(message=message, category=category, level=level))
        self._log.debug("[BREADCRUMB] %s (%s/%s)", message, category, level)

    def set_user_context(
        self, user_id: Optional[str] = None, attributes: Optional[dict[str, Any]] = None
    ) -> None:
        """Set the user attached to later reports."""
        self.user_id = user_id
        self.user_attributes = dict(attributes or {})

    def log_user_activity(self, action: str, data: Optional[dict[str, Any]] = None) -> None:
        """Log a user action and keep it as a breadcrumb."""
        self._log.info("[USER ACTIVITY] %s %s", action, data or {})
        self.add_breadcrumb(action, category="activity")


def report_if_needed(
    manager: ErrorManager,
    reporter: Optional[Reporter],
    error: NormalizedError,
    context: Optional[dict[str, Any]] = None,
    policy: Optional[FeaturePolicy] = None,
    should_report: Optional[Callable[[NormalizedError], bool]] = None,
) -> bool:
    """Report ``error`` when reporting is enabled and the predicate agrees.

    The predicate defaults to ``manager.should_report``.

    Returns True if the reporter accepted the error.
    """
    if reporter is None:
        return False
    policy = policy or manager.policy
    if not policy.enabled(ENABLE_ERROR_REPORTING):
        return False
    predicate = should_report or manager.should_report
    if not predicate(error):
        return False
    try:
        reporter.report(error, dict(context or {}))
    except Exception:
        logger.exception("Reporter raised while reporting error")
        return False
    return True
