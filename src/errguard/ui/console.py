"""Rich console setup and output helpers for errguard."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from errguard.errors.taxonomy import NormalizedError
from errguard.ui.theme import (
    SEVERITY_BORDERS,
    SEVERITY_SYMBOLS,
    ErrguardColors,
    Symbols,
    errguard_theme,
)

# Main console instance with errguard theme
console = Console(theme=errguard_theme)


def print_error(message: str, title: str = "Error") -> None:
    """Print an error message in a styled panel."""
    console.print(
        Panel(
            f"[error]{Symbols.CROSS} {escape(message)}[/error]",
            title=f"[error]{title}[/error]",
            border_style=ErrguardColors.HIGH,
            box=box.ROUNDED,
        )
    )


def print_success(message: str, title: str = "Success") -> None:
    """Print a success message in a styled panel."""
    console.print(
        Panel(
            f"[success]{Symbols.CHECK} {message}[/success]",
            title=f"[success]{title}[/success]",
            border_style=ErrguardColors.SUCCESS,
            box=box.ROUNDED,
        )
    )


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Create a styled table with the given columns.

    Args:
        title: Table title
        columns: List of (name, style) tuples for columns

    Returns:
        Configured Rich Table instance
    """
    table = Table(
        title=f"[primary]{title}[/primary]",
        box=box.ROUNDED,
        border_style=ErrguardColors.BORDER,
        header_style="table.header",
        show_lines=False,
    )
    for name, style in columns:
        table.add_column(name, style=style)
    return table


def retry_hint(error: NormalizedError) -> Optional[str]:
    """Short hint telling the user whether trying again may help."""
    if error.retry:
        return "This may be temporary. Try again."
    return None


def render_error_details(error: NormalizedError, show_stack: bool = False) -> Panel:
    """Build a full error panel: message, classification, retry hint, stack."""
    severity = error.severity.value
    style = f"severity.{severity}"
    lines = [
        f"[{style}]{SEVERITY_SYMBOLS[severity]} {escape(error.message)}[/{style}]",
        "",
        f"[muted]category:[/muted] {error.category.value}   "
        f"[muted]severity:[/muted] [{style}]{severity}[/{style}]",
    ]
    if error.code is not None:
        lines.append(f"[muted]code:[/muted] {escape(str(error.code))}")
    hint = retry_hint(error)
    if hint:
        lines.append(f"[muted]{Symbols.RETRY} {hint}[/muted]")
    if show_stack and error.stack:
        lines.append("")
        lines.append(f"[muted]{escape(error.stack.rstrip())}[/muted]")

    return Panel(
        "\n".join(lines),
        title=f"[{style}]Error[/{style}]",
        border_style=SEVERITY_BORDERS[severity],
        box=box.ROUNDED,
    )


def print_error_details(error: NormalizedError, show_stack: bool = False) -> None:
    """Print the full error panel."""
    console.print(render_error_details(error, show_stack=show_stack))
