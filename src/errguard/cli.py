"""Main CLI entry point for errguard."""

import asyncio
import json
from typing import Optional

import typer
from rich.markup import escape

from errguard import __app_name__, __version__
from errguard.config.log_setup import setup_logging
from errguard.config.settings import Settings, create_default_config, get_settings
from errguard.errors.boundary import ErrorBoundary, FallbackView
from errguard.errors.variants import AppError
from errguard.runtime import Runtime, build_runtime
from errguard.ui.console import (
    console,
    create_table,
    print_error,
    print_error_details,
    print_success,
)
from errguard.ui.theme import Symbols
from errguard.ui.toast import ToastNotifier, ToastRenderer
from errguard.utils.retry import retry_with_backoff

app = typer.Typer(
    name=__app_name__,
    help="Normalize, classify and report application errors",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"[primary]{__app_name__}[/primary] version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    production: bool = typer.Option(
        False,
        "--production",
        help="Apply production reporting and stack-trace rules",
    ),
):
    """errguard - error normalization and retry toolkit."""
    create_default_config()

    settings = get_settings()
    if production:
        settings = settings.model_copy(update={"environment": "production"})
    setup_logging(settings.log_level)
    ctx.obj = build_runtime(settings)


def _runtime(ctx: typer.Context) -> Runtime:
    if isinstance(ctx.obj, Runtime):
        return ctx.obj
    return build_runtime(Settings())


@app.command()
def classify(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Error message to classify"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Normalize MESSAGE as if it were raised by a runtime error."""
    runtime = _runtime(ctx)
    normalized = runtime.manager.handle(RuntimeError(message))

    if as_json:
        console.print_json(json.dumps(normalized.to_dict(), default=str))
        return

    print_error_details(normalized, show_stack=False)
    _print_report_decision(runtime, runtime.manager.should_report(normalized))


@app.command()
def status(
    ctx: typer.Context,
    code: int = typer.Argument(..., help="HTTP status code"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Server message"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Map an HTTP status CODE to its typed error."""
    if code < 100 or code > 599:
        print_error(f"Not an HTTP status code: {code}")
        raise typer.Exit(1)

    runtime = _runtime(ctx)
    typed = runtime.manager.create_from_http_status(code, message)
    normalized = runtime.manager.handle(typed)

    if as_json:
        payload = {"kind": typed.kind.value, **normalized.to_dict(), "stack": None}
        console.print_json(json.dumps(payload, default=str))
        return

    console.print(f"[muted]kind:[/muted] [primary]{typed.kind.value}[/primary]")
    print_error_details(normalized, show_stack=False)
    _print_report_decision(runtime, runtime.manager.should_report(normalized))


@app.command()
def flags(ctx: typer.Context):
    """List feature flags and their state."""
    runtime = _runtime(ctx)
    table = create_table(
        "Feature flags",
        [("Flag", "primary"), ("Enabled", ""), ("Group", "muted"), ("Description", "")],
    )
    table.columns[0].no_wrap = True
    for flag in runtime.policy.all_flags().values():
        if flag.enabled:
            enabled = f"[success]{Symbols.CHECK}[/success]"
        else:
            enabled = f"[error]{Symbols.CROSS}[/error]"
        table.add_row(flag.name, enabled, flag.control_group or "-", flag.description)
    console.print(table)


@app.command()
def demo(
    ctx: typer.Context,
    delay_ms: float = typer.Option(100, "--delay-ms", help="Initial retry delay in milliseconds"),
):
    """Run a short scenario through boundary, retry, register and toasts."""
    runtime = _runtime(ctx)
    renderer = ToastRenderer(
        durations=runtime.settings.ui.toast_durations,
        show_retry_action=runtime.settings.ui.show_retry_action,
    )
    notifier = ToastNotifier(runtime.register, renderer)
    notifier.attach()

    # 1. Boundary: a region that fails once, then recovers after reset
    console.print("\n[primary]1. Error boundary[/primary]")
    calls = {"count": 0}

    def profile_region() -> str:
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("Failed to fetch user profile")
        return "Profile loaded"

    boundary = ErrorBoundary(
        profile_region,
        runtime.manager,
        reporter=runtime.reporter,
        on_error=runtime.register.set_error,
    )
    output = boundary.render()
    if isinstance(output, FallbackView):
        console.print(f"[muted]{output.title}:[/muted] {escape(output.message)}")
        output.reset()
    print_success(boundary.render(), title="Boundary recovered")

    # 2. Retry: a transient failure that succeeds on the third attempt
    console.print("\n[primary]2. Retry with backoff[/primary]")
    attempts = {"count": 0}

    async def flaky_operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise AppError.network("Connection reset by peer")
        return f"Succeeded after {attempts['count']} attempts"

    result = asyncio.run(
        retry_with_backoff(
            flaky_operation,
            max_retries=runtime.settings.retry.max_retries,
            initial_delay_ms=delay_ms,
            should_retry=runtime.manager.retry_predicate(),
        )
    )
    print_success(result, title="Retry")

    # 3. HTTP failures published to the register
    console.print("\n[primary]3. HTTP failures[/primary]")
    for code in (404, 429, 503):
        typed = runtime.manager.create_from_http_status(code)
        runtime.register.set_error(runtime.manager.handle(typed))

    notifier.detach()

    table = create_table(
        "Error history", [("Category", "primary"), ("Severity", ""), ("Message", "")]
    )
    for error in runtime.register.history:
        severity = error.severity.value
        table.add_row(
            error.category.value,
            f"[severity.{severity}]{severity}[/severity.{severity}]",
            escape(error.message),
        )
    console.print(table)


def _print_report_decision(runtime: Runtime, report: bool) -> None:
    environment = "production" if runtime.manager.production else "development"
    if report:
        console.print(
            f"[warning]{Symbols.NEXT} Would be reported[/warning] [muted]({environment})[/muted]"
        )
    else:
        console.print(f"[muted]{Symbols.NEXT} Not reported ({environment})[/muted]")


if __name__ == "__main__":
    app()
