"""Utility functions for cli output."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/mdmermaid/cli/output.py
from __future__ import annotations

from typing import IO, Optional

from rich.console import Console
from rich.text import Text

from mdmermaid.diagnostics import DiagnosticMessage, SourceFile

_SEVERITY_STYLES = {
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


def create_console(stream: Optional[IO[str]] = None, no_color: bool = False) -> Console:
    """Create the console diagnostics are reported on (stderr by default)."""
    if stream is None:
        return Console(stderr=True, highlight=False, no_color=no_color)
    return Console(file=stream, highlight=False, no_color=no_color)


def format_message(message: DiagnosticMessage, display_name: str) -> Text:
    """Format one diagnostic as ``file:line:column  severity  reason  origin``."""
    text = Text()
    text.append(f"{display_name}:{message.position}", style="bold")
    text.append("  ")
    text.append(f"{message.severity:<7}", style=_SEVERITY_STYLES.get(message.severity, ""))
    text.append("  ")
    text.append(message.reason)
    if message.origin:
        text.append(f"  {message.origin}", style="dim")
    return text


def report_messages(console: Console, source_file: SourceFile, quiet: bool = False) -> None:
    """Print the diagnostics of one document.

    Parameters
    ----------
    console : Console
        Destination console
    source_file : SourceFile
        Processed document
    quiet : bool, default False
        Report only warnings and errors

    """
    messages = [m for m in source_file.messages if not (quiet and m.severity == "info")]
    if not messages:
        return

    for message in messages:
        console.print(format_message(message, source_file.display_name))

    warnings = len(source_file.warnings)
    errors = len(source_file.errors)
    if warnings or errors:
        console.print(
            Text(f"{source_file.display_name}: {warnings} warning(s), {errors} error(s)", style="bold yellow")
        )


def report_error(console: Console, message: str) -> None:
    """Print a fatal error."""
    console.print(Text(f"Error: {message}", style="bold red"))
