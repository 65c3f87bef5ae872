"""Shared utilities for zfswap CLI modules."""
from __future__ import annotations

import os
from typing import Optional

import typer
from rich.console import Console


def is_mock() -> bool:
    """Return True when CLI runs in mock mode."""
    from zfswap.core.config import mock_enabled
    return mock_enabled()


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands."""
    from zfswap.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def setup_syslog(tag: str) -> None:
    """Forward log records to syslog under ``tag``."""
    from zfswap.core.logger import setup_syslog as _setup_syslog
    _setup_syslog(tag)


def require_root(console: Console, mock: bool = False) -> None:
    """Exit with status 1 unless running as root (or in mock mode)."""
    if mock or os.geteuid() == 0:
        return
    print_error(console, "This command must be run as root. Exiting.")
    raise typer.Exit(1)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    console.print(f"[yellow]{prefix}[/yellow] {message}")
