#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Logging setup for the mdmermaid command line.

Log records go to the same rich console the diagnostics report is printed
on. Records of the ``mdmermaid.diagnostics`` logger repeat what that report
already shows, so the console only carries them in trace mode; a log file
always receives them.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DIAGNOSTICS_LOGGER = "mdmermaid.diagnostics"

# Loggers that are only interesting while tracing
_NOISY_LOGGERS = ("asyncio",)


class _SkipLogger(logging.Filter):
    """Drop records from one logger and its children."""

    def __init__(self, name: str):
        super().__init__()
        self.prefix = name

    def filter(self, record: logging.LogRecord) -> bool:
        return not (record.name == self.prefix or record.name.startswith(self.prefix + "."))


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure root logging for a CLI run.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g., "INFO")
    log_file : str, optional
        File that also receives every record, with timestamps
    trace_mode : bool, default False
        Show timestamps, logger names and per-diagram diagnostics on the console
    console : Console, optional
        Console to log to; a stderr console when omitted

    Returns
    -------
    logging.Logger
        The configured root logger

    """
    level = log_level if isinstance(log_level, int) else getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=trace_mode,
        show_path=trace_mode,
        markup=False,
        rich_tracebacks=trace_mode,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("[%(name)s] %(message)s" if trace_mode else "%(message)s"))
    if not trace_mode:
        console_handler.addFilter(_SkipLogger(DIAGNOSTICS_LOGGER))
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if trace_mode else logging.WARNING)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
            )
            root_logger.addHandler(file_handler)
            root_logger.debug("Logging to file: %s", log_file)

    return root_logger
