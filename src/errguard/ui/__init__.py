"""UI components for errguard - Rich console, theme and toasts."""

from errguard.ui.console import (
    console,
    create_table,
    print_error,
    print_error_details,
    print_success,
    render_error_details,
    retry_hint,
)
from errguard.ui.theme import ErrguardColors, Symbols, errguard_theme
from errguard.ui.toast import (
    DEFAULT_TOAST_DURATIONS,
    Toast,
    ToastAction,
    ToastNotifier,
    ToastRenderer,
    toast_duration,
)

__all__ = [
    # Console basics
    "console",
    "print_error",
    "print_success",
    "create_table",
    # Error display
    "render_error_details",
    "print_error_details",
    "retry_hint",
    # Toasts
    "DEFAULT_TOAST_DURATIONS",
    "Toast",
    "ToastAction",
    "ToastRenderer",
    "ToastNotifier",
    "toast_duration",
    # Theme
    "ErrguardColors",
    "errguard_theme",
    "Symbols",
]
