"""Tests for console toasts and error panels."""

import io

import pytest
from rich.console import Console

from errguard.errors.taxonomy import ErrorCategory, ErrorSeverity, NormalizedError
from errguard.ui.console import render_error_details, retry_hint
from errguard.ui.theme import errguard_theme
from errguard.ui.toast import ToastNotifier, ToastRenderer, toast_duration


def make_error(severity=ErrorSeverity.HIGH, retry=True, message="Server error occurred"):
    return NormalizedError(message, severity, ErrorCategory.SERVER, retry=retry)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def renderer(output):
    console = Console(file=output, theme=errguard_theme, width=100, color_system=None)
    return ToastRenderer(console=console)


class TestToastDuration:
    """Tests for severity durations."""

    @pytest.mark.parametrize(
        "severity,seconds",
        [
            (ErrorSeverity.CRITICAL, 8.0),
            (ErrorSeverity.HIGH, 5.0),
            (ErrorSeverity.MEDIUM, 4.0),
            (ErrorSeverity.LOW, 3.0),
        ],
    )
    def test_defaults(self, severity, seconds):
        """Durations follow severity."""
        assert toast_duration(severity) == seconds

    def test_overrides(self):
        """Configured durations replace defaults per severity."""
        assert toast_duration(ErrorSeverity.LOW, {"low": 1.5}) == 1.5
        assert toast_duration(ErrorSeverity.HIGH, {"low": 1.5}) == 5.0


class TestToastRenderer:
    """Tests for building and showing toasts."""

    def test_build_with_retry(self, renderer):
        """Retryable errors with a retry callback get a Retry action."""
        toast = renderer.build(make_error(), on_retry=lambda: None)
        assert [a.label for a in toast.actions] == ["Retry", "Dismiss"]
        assert toast.duration == 5.0

    def test_build_without_callback(self, renderer):
        """Without a callback only Dismiss is offered."""
        toast = renderer.build(make_error())
        assert [a.label for a in toast.actions] == ["Dismiss"]

    def test_non_retryable(self, renderer):
        """Non-retryable errors never offer Retry."""
        toast = renderer.build(make_error(retry=False), on_retry=lambda: None)
        assert [a.label for a in toast.actions] == ["Dismiss"]

    def test_retry_action_disabled(self, output):
        """The retry action can be turned off."""
        renderer = ToastRenderer(console=Console(file=output), show_retry_action=False)
        toast = renderer.build(make_error(), on_retry=lambda: None)
        assert [a.label for a in toast.actions] == ["Dismiss"]

    def test_show_prints_and_tracks(self, renderer, output):
        """show prints the message and keeps the toast active."""
        toast = renderer.show(make_error(message="Disk [full]"))
        assert "Disk [full]" in output.getvalue()
        assert renderer.active() == [toast]

    def test_dismiss_action(self, renderer):
        """The Dismiss action hides the toast."""
        toast = renderer.show(make_error())
        toast.actions[-1].callback()
        assert toast.dismissed
        assert renderer.active() == []
        assert renderer.dismiss(toast.id) is False

    def test_expiry(self, renderer):
        """Toasts expire after their duration."""
        toast = renderer.build(make_error(severity=ErrorSeverity.LOW))
        assert not toast.is_expired(toast.created_at + 2.9)
        assert toast.is_expired(toast.created_at + 3.0)


class TestToastNotifier:
    """Tests for the register-driven notifier."""

    def test_shows_visible_errors_once(self, register, renderer):
        """Each published error produces one toast and is then hidden."""
        notifier = ToastNotifier(register, renderer)
        notifier.attach()
        error = make_error()
        register.set_error(error)
        assert len(renderer.toasts) == 1
        assert register.is_visible is False
        assert register.current_error is error

        register.show()
        assert len(renderer.toasts) == 2

    def test_clear_does_not_toast(self, register, renderer):
        """Clearing the register shows nothing."""
        ToastNotifier(register, renderer).attach()
        register.clear_error()
        register.set_error(None)
        assert renderer.toasts == []

    def test_detach(self, register, renderer):
        """Detached notifiers stop showing toasts."""
        notifier = ToastNotifier(register, renderer)
        notifier.attach()
        notifier.attach()
        notifier.detach()
        register.set_error(make_error())
        assert renderer.toasts == []


class TestErrorDetails:
    """Tests for the full error panel."""

    def _render(self, panel) -> str:
        output = io.StringIO()
        Console(file=output, theme=errguard_theme, width=120, color_system=None).print(panel)
        return output.getvalue()

    def test_panel_contents(self):
        """The panel shows message, category and retry hint."""
        text = self._render(render_error_details(make_error()))
        assert "Server error occurred" in text
        assert "server" in text
        assert "Try again" in text

    def test_stack_only_when_requested(self):
        """Stacks are shown only when asked for."""
        error = NormalizedError(
            "x", ErrorSeverity.LOW, ErrorCategory.CLIENT, stack="Traceback: line 42"
        )
        assert "line 42" not in self._render(render_error_details(error))
        assert "line 42" in self._render(render_error_details(error, show_stack=True))

    def test_retry_hint(self):
        """Only retryable errors get a hint."""
        assert retry_hint(make_error(retry=True))
        assert retry_hint(make_error(retry=False)) is None
