"""Console output and leveled log messages via Rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def info(msg: str) -> None:
    console.print(f"[blue]\\[INFO][/blue] {escape(msg)}")


def warn(msg: str) -> None:
    err_console.print(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str) -> None:
    err_console.print(f"[red]\\[ERROR][/red] {escape(msg)}")


def debug(msg: str) -> None:
    if _verbose:
        err_console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")
