"""Logging setup for errguard."""

import logging
import re

from rich.logging import RichHandler

from errguard.ui.console import console


class SensitiveDataFilter(logging.Filter):
    """Filter to prevent logging of sensitive data.

    Only credential-shaped text is matched (``password=...``,
    ``Authorization: ...``, ``Bearer ...``). Bare words such as
    "authorization" or "token" are error categories and ordinary messages.
    """

    SENSITIVE_PATTERNS = [
        re.compile(r"\b(?:password|passwd|api[_-]?key|secret|token|cookie)\s*[=:]\s*\S", re.I),
        re.compile(r"\bauthorization\s*:\s*\S", re.I),
        re.compile(r"\bbearer\s+\S", re.I),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact log records containing sensitive data."""
        msg = str(record.msg)
        args = str(record.args) if record.args else ""
        combined = f"{msg} {args}"

        if any(pattern.search(combined) for pattern in self.SENSITIVE_PATTERNS):
            record.msg = "[REDACTED - sensitive data]"
            record.args = None
        return True


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a Rich handler and the sensitive data filter to the errguard logger."""
    errguard_logger = logging.getLogger("errguard")
    errguard_logger.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in errguard_logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.addFilter(SensitiveDataFilter())
        errguard_logger.addHandler(handler)

    return errguard_logger
