"""Command-line interface for mdmermaid.

Reads Markdown documents, renders their Mermaid diagrams and writes the
rewritten Markdown. One render engine is shared by every document of an
invocation.

Examples
--------
Render the diagrams of a README and print the result::

    $ mdmermaid README.md

Rewrite every Markdown file of a directory in place::

    $ mdmermaid --in-place docs/

Read from stdin, write images next to the current directory::

    $ cat notes.md | mdmermaid - -o notes.rendered.md

Use a dark theme and fail on the first broken diagram::

    $ mdmermaid --theme dark --fail-fast README.md

Write the effective configuration as a starting config file::

    $ mdmermaid --theme dark --print-config > .mdmermaid.toml

Options can also come from ``.mdmermaid.toml`` (or ``.yaml``/``.json``, or
``[tool.mdmermaid]`` in pyproject.toml), found in the current directory, its
parents or the home directory, or named by ``--config`` or the
``MDMERMAID_CONFIG`` environment variable. Command-line flags win.

Exit Codes
----------
0 on success; 1 when a document could not be processed (or had warnings
with ``--fail-on-warnings``); 2 for usage and configuration errors; 3 when
the Mermaid CLI is not installed.

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/mdmermaid/cli/__init__.py
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from mdmermaid import __version__
from mdmermaid.api import aprocess, aprocess_file, write_output
from mdmermaid.cli.config import format_config, load_config_with_priority, options_from_config
from mdmermaid.cli.output import create_console, report_error, report_messages
from mdmermaid.constants import CONFIG_ENV_VAR, MARKDOWN_EXTENSIONS
from mdmermaid.diagnostics import SourceFile
from mdmermaid.diagrams.engine import LazyRenderEngine
from mdmermaid.exceptions import (
    DependencyError,
    FileError,
    MdMermaidError,
    OutputWriteError,
    ParsingError,
    RenderingError,
    ValidationError,
)
from mdmermaid.exceptions import FileNotFoundError as InputNotFoundError
from mdmermaid.logging_utils import configure_logging
from mdmermaid.options.base import field_choices
from mdmermaid.options.mermaid import MermaidCliOptions, MermaidOptions

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 2
EXIT_DEPENDENCY_ERROR = 3

STDIN_MARKER = "-"

__all__ = ["main", "create_parser", "build_options", "collect_input_files"]


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mdmermaid",
        description="Render Mermaid diagrams in Markdown documents to images.",
    )
    parser.add_argument(
        "input",
        nargs="*",
        help="Markdown files or directories to process; '-' or nothing reads stdin",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    output = parser.add_argument_group("output")
    destination = output.add_mutually_exclusive_group()
    destination.add_argument("-o", "--output", help="Write the result to this file (single input only)")
    destination.add_argument("-i", "--in-place", action="store_true", help="Overwrite the input files")

    mermaid = parser.add_argument_group("diagrams")
    mermaid.add_argument("--output-dir", help="Directory rendered diagrams are written to")
    mermaid.add_argument("--marker", dest="diagram_marker", help="Code block language identifying diagrams")
    mermaid.add_argument(
        "--reference-style",
        choices=field_choices(MermaidOptions, "reference_style"),
        help="Image reference syntax for rendered diagrams; only 'full' writes alt as the image text",
    )
    mermaid.add_argument(
        "--simple",
        action="store_true",
        default=None,
        help='Emit <div class="mermaid"> blocks for client-side rendering instead of images',
    )
    mermaid.add_argument(
        "--render-links",
        action="store_true",
        default=None,
        help="Also render diagram files referenced by links titled 'mermaid:'",
    )
    mermaid.add_argument(
        "--fail-fast",
        dest="fail_on_render_error",
        action="store_true",
        default=None,
        help="Stop at the first diagram that fails to render",
    )
    mermaid.add_argument(
        "--absolute-urls", action="store_true", default=None, help="Write absolute image paths into the document"
    )
    mermaid.add_argument(
        "--create-dirs",
        dest="create_output_dirs",
        action="store_true",
        default=None,
        help="Create missing output directories",
    )

    engine = parser.add_argument_group("mermaid cli")
    engine.add_argument("--mmdc", dest="executable", help="Mermaid CLI executable (default: mmdc)")
    engine.add_argument(
        "--format",
        dest="output_format",
        choices=field_choices(MermaidCliOptions, "output_format"),
        help="Image format",
    )
    engine.add_argument("--theme", choices=field_choices(MermaidCliOptions, "theme"), help="Mermaid theme")
    engine.add_argument("--background", dest="background_color", help="Background color, e.g. 'transparent'")
    engine.add_argument(
        "--sandbox", action="store_true", help="Keep the browser sandbox enabled (runs without --no-sandbox)"
    )
    engine.add_argument("--timeout", type=float, help="Seconds allowed per diagram")
    engine.add_argument("--max-concurrency", type=int, help="Maximum number of mmdc processes at once")

    general = parser.add_argument_group("general")
    general.add_argument("--config", help=f"Configuration file (default: discovered, or ${CONFIG_ENV_VAR})")
    general.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective configuration as TOML and exit",
    )
    general.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    general.add_argument("--log-file", help="Also write log output to this file")
    general.add_argument("--trace", action="store_true", help="Debug logging with timestamps")
    general.add_argument("-q", "--quiet", action="store_true", help="Report only warnings and errors")
    general.add_argument("--no-color", action="store_true", help="Disable colored diagnostics")
    general.add_argument(
        "--fail-on-warnings", action="store_true", help="Exit with status 1 when any document has warnings"
    )

    return parser


def _setup_logging_level(parsed_args: argparse.Namespace, console: Console) -> None:
    log_level = logging.DEBUG if parsed_args.trace else getattr(logging, parsed_args.log_level.upper())
    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace, console=console)


def build_options(parsed_args: argparse.Namespace, config: dict[str, Any]) -> MermaidOptions:
    """Combine configuration file values with command-line flags.

    Parameters
    ----------
    parsed_args : argparse.Namespace
        Parsed command-line arguments; unset flags are None
    config : dict
        Loaded configuration

    Returns
    -------
    MermaidOptions
        Options without an engine

    Raises
    ------
    ValidationError
        If the combined values are invalid

    """
    options = options_from_config(config)

    engine_updates = {
        name: getattr(parsed_args, name)
        for name in ("executable", "output_format", "theme", "background_color", "timeout", "max_concurrency")
        if getattr(parsed_args, name) is not None
    }
    if parsed_args.sandbox:
        engine_updates["no_sandbox"] = False

    updates = {
        name: getattr(parsed_args, name)
        for name in (
            "output_dir",
            "diagram_marker",
            "reference_style",
            "simple",
            "render_links",
            "fail_on_render_error",
            "absolute_urls",
            "create_output_dirs",
        )
        if getattr(parsed_args, name) is not None
    }

    try:
        engine_options = options.engine_options.create_updated(**engine_updates)
        return options.create_updated(engine_options=engine_options, **updates)
    except ValueError as e:
        raise ValidationError(str(e), original_error=e) from e


def collect_input_files(inputs: list[str]) -> list[Optional[Path]]:
    """Expand the positional inputs.

    Directories contribute their Markdown files, recursively and sorted.
    ``-`` stands for stdin and is returned as None.

    Raises
    ------
    FileNotFoundError
        If an input does not exist

    """
    items: list[Optional[Path]] = []
    for raw in inputs or [STDIN_MARKER]:
        if raw == STDIN_MARKER:
            items.append(None)
            continue
        path = Path(raw)
        if path.is_dir():
            items.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in MARKDOWN_EXTENSIONS)
            )
        elif path.exists():
            items.append(path)
        else:
            raise InputNotFoundError(str(path))
    return items


async def _process_item(item: Optional[Path], parsed_args: argparse.Namespace, options: MermaidOptions) -> SourceFile:
    if item is not None and (parsed_args.in_place or parsed_args.output):
        return await aprocess_file(item, parsed_args.output, options=options)

    if item is None:
        text = await asyncio.to_thread(sys.stdin.read)
        source_file = await aprocess(text, options=options)
    else:
        source_file = await aprocess(item, options=options)

    if parsed_args.output:
        await write_output(parsed_args.output, source_file.contents or "")
    else:
        sys.stdout.write(source_file.contents or "")
        sys.stdout.flush()
    return source_file


async def _process_inputs(
    items: list[Optional[Path]], parsed_args: argparse.Namespace, options: MermaidOptions, console: Console
) -> int:
    status = EXIT_SUCCESS
    try:
        for item in items:
            try:
                source_file = await _process_item(item, parsed_args, options)
            except (FileError, ParsingError) as e:
                report_error(console, e.message)
                status = EXIT_ERROR
                continue
            except OutputWriteError as e:
                report_error(console, e.message)
                if options.fail_on_render_error:
                    return EXIT_ERROR
                status = EXIT_ERROR
                continue
            except RenderingError as e:
                # Only raised with --fail-fast
                report_error(console, f"{item or '<stdin>'}: {e.message}")
                return EXIT_ERROR

            report_messages(console, source_file, quiet=parsed_args.quiet)
            if source_file.errors or (parsed_args.fail_on_warnings and source_file.warnings):
                status = EXIT_ERROR
    finally:
        if options.engine is not None:
            await options.engine.aclose()

    return status


def main(args: list[str] | None = None) -> int:
    """Execute the CLI and return the exit status."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    console = create_console(no_color=parsed_args.no_color)
    _setup_logging_level(parsed_args, console)

    if parsed_args.in_place and (not parsed_args.input or STDIN_MARKER in parsed_args.input):
        report_error(console, "--in-place cannot be used with stdin")
        return EXIT_VALIDATION_ERROR

    try:
        config = load_config_with_priority(parsed_args.config, os.environ.get(CONFIG_ENV_VAR))
        options = build_options(parsed_args, config)
    except (argparse.ArgumentTypeError, ValidationError) as e:
        report_error(console, str(e))
        return EXIT_VALIDATION_ERROR

    if parsed_args.print_config:
        sys.stdout.write(format_config(options))
        return EXIT_SUCCESS

    try:
        items = collect_input_files(parsed_args.input)
    except FileError as e:
        report_error(console, e.message)
        return EXIT_ERROR

    if len(items) > 1 and parsed_args.output is not None:
        report_error(console, "--output needs exactly one input")
        return EXIT_VALIDATION_ERROR

    if not options.simple:
        options = options.create_updated(engine=LazyRenderEngine(options.engine_options))

    logger.debug("Processing %d input(s)", len(items))
    try:
        return asyncio.run(_process_inputs(items, parsed_args, options, console))
    except DependencyError as e:
        report_error(console, e.message)
        return EXIT_DEPENDENCY_ERROR
    except MdMermaidError as e:
        report_error(console, e.message)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
