"""Toast notifications - the console presentation sink for errors.

A toast is a short, dismissible, severity-styled notice. The console has no
timers, so the visible duration is carried on the toast for whoever drives
expiry and shown in the panel subtitle.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from errguard.errors.taxonomy import ErrorSeverity, NormalizedError
from errguard.state.register import ErrorRegister
from errguard.ui.console import console as default_console
from errguard.ui.theme import SEVERITY_BORDERS, SEVERITY_SYMBOLS, Symbols

logger = logging.getLogger(__name__)

# Seconds a toast stays visible, by severity
DEFAULT_TOAST_DURATIONS: dict[str, float] = {
    ErrorSeverity.CRITICAL.value: 8.0,
    ErrorSeverity.HIGH.value: 5.0,
    ErrorSeverity.MEDIUM.value: 4.0,
    ErrorSeverity.LOW.value: 3.0,
}

_toast_ids = itertools.count(1)


def toast_duration(
    severity: ErrorSeverity, durations: Optional[dict[str, float]] = None
) -> float:
    """Visible duration in seconds for a severity."""
    table = {**DEFAULT_TOAST_DURATIONS, **(durations or {})}
    return table.get(severity.value, DEFAULT_TOAST_DURATIONS[ErrorSeverity.MEDIUM.value])


@dataclass
class ToastAction:
    """A button-like action offered on a toast."""

    label: str
    callback: Callable[[], None]


@dataclass
class Toast:
    """A rendered notification."""

    message: str
    severity: ErrorSeverity
    duration: float
    actions: list[ToastAction] = field(default_factory=list)
    id: int = field(default_factory=lambda: next(_toast_ids))
    created_at: float = field(default_factory=time.monotonic)
    dismissed: bool = False

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.created_at >= self.duration

    @property
    def is_visible(self) -> bool:
        return not self.dismissed and not self.is_expired()


class ToastRenderer:
    """Renders NormalizedErrors as severity-styled console toasts."""

    def __init__(
        self,
        console: Optional[Console] = None,
        durations: Optional[dict[str, float]] = None,
        show_retry_action: bool = True,
    ):
        self.console = console or default_console
        self.durations = durations
        self.show_retry_action = show_retry_action
        self.toasts: list[Toast] = []

    def build(
        self,
        error: NormalizedError,
        on_retry: Optional[Callable[[], None]] = None,
    ) -> Toast:
        """Create a toast for an error without printing it."""
        toast = Toast(
            message=error.message,
            severity=error.severity,
            duration=toast_duration(error.severity, self.durations),
        )
        if on_retry and error.retry and self.show_retry_action:
            toast.actions.append(ToastAction("Retry", on_retry))
        toast.actions.append(ToastAction("Dismiss", lambda: self.dismiss(toast.id)))
        return toast

    def render(self, toast: Toast) -> Panel:
        severity = toast.severity.value
        style = f"severity.{severity}"
        actions = "  ".join(f"[{action.label}]" for action in toast.actions)
        return Panel(
            f"[{style}]{SEVERITY_SYMBOLS[severity]} {escape(toast.message)}[/{style}]",
            subtitle=f"[muted]{escape(actions)} {Symbols.BULLET} {toast.duration:g}s[/muted]",
            subtitle_align="right",
            border_style=SEVERITY_BORDERS[severity],
            box=box.ROUNDED,
            expand=False,
        )

    def show(
        self,
        error: NormalizedError,
        on_retry: Optional[Callable[[], None]] = None,
    ) -> Toast:
        """Build, print and track a toast for an error."""
        toast = self.build(error, on_retry=on_retry)
        self.toasts.append(toast)
        self.console.print(self.render(toast))
        logger.debug(f"Toast {toast.id} shown for {toast.duration:g}s")
        return toast

    def dismiss(self, toast_id: int) -> bool:
        """Dismiss a toast by id. Returns False if no such toast is active."""
        for toast in self.toasts:
            if toast.id == toast_id and not toast.dismissed:
                toast.dismissed = True
                return True
        return False

    def active(self) -> list[Toast]:
        """Toasts not yet dismissed or expired."""
        return [toast for toast in self.toasts if toast.is_visible]


class ToastNotifier:
    """Shows a toast whenever the register holds a visible current error.

    After showing, the notifier hides the error in the register so the same
    error is not shown twice.
    """

    def __init__(self, register: ErrorRegister, renderer: ToastRenderer):
        self.register = register
        self.renderer = renderer
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.register.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, register: ErrorRegister) -> None:
        error = register.current_error
        if error is not None and register.is_visible:
            self.renderer.show(error)
            register.hide()
