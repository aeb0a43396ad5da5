"""Theme and color definitions for errguard."""

from dataclasses import dataclass

from rich.theme import Theme


@dataclass(frozen=True)
class ErrguardColors:
    """Color palette for errguard output."""

    PRIMARY = "#61afef"

    # Severity colors
    CRITICAL = "#be5046"
    HIGH = "#e06c75"
    MEDIUM = "#e5c07b"
    LOW = "#56b6c2"

    SUCCESS = "#98c379"
    MUTED = "#5c6370"
    BORDER = "#3e4451"


errguard_theme = Theme(
    {
        "primary": f"bold {ErrguardColors.PRIMARY}",
        "success": f"bold {ErrguardColors.SUCCESS}",
        "error": f"bold {ErrguardColors.HIGH}",
        "warning": f"bold {ErrguardColors.MEDIUM}",
        "info": f"{ErrguardColors.LOW}",
        "muted": f"{ErrguardColors.MUTED}",
        # One style per severity value
        "severity.critical": f"bold reverse {ErrguardColors.CRITICAL}",
        "severity.high": f"bold {ErrguardColors.HIGH}",
        "severity.medium": f"bold {ErrguardColors.MEDIUM}",
        "severity.low": f"{ErrguardColors.LOW}",
        "table.header": f"bold {ErrguardColors.PRIMARY}",
    }
)

SEVERITY_BORDERS = {
    "critical": ErrguardColors.CRITICAL,
    "high": ErrguardColors.HIGH,
    "medium": ErrguardColors.MEDIUM,
    "low": ErrguardColors.LOW,
}


class Symbols:
    """Unicode symbols for output."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "⚠"
    INFO = "ℹ"
    BULLET = "•"
    RETRY = "↻"
    NEXT = "➜"


SEVERITY_SYMBOLS = {
    "critical": Symbols.CROSS,
    "high": Symbols.CROSS,
    "medium": Symbols.WARN,
    "low": Symbols.INFO,
}
