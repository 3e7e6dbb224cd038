#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/engine.py
"""Diagram render engines.

A render engine turns diagram source text into image bytes. Engines are
created once and shared by every diagram of a run (and by every document in
a CLI invocation), so ``render`` must tolerate concurrent calls.

:class:`MermaidCliEngine` drives the Mermaid CLI (``mmdc``) through asyncio
subprocesses. Each call writes the source to a temporary ``.mmd`` file, runs::

    mmdc -i diagram.mmd -o diagram.svg -t default -b white [-p puppeteer.json] -q

and reads the produced image back.

"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from mdmermaid.constants import DEFAULT_PUPPETEER_SANDBOX_ARGS
from mdmermaid.exceptions import RenderError
from mdmermaid.options.base import validate_options_type
from mdmermaid.options.mermaid import MermaidCliOptions
from mdmermaid.utils.decorators import require_executable, timed

logger = logging.getLogger(__name__)

MMDC_INSTALL_COMMAND = "npm install -g @mermaid-js/mermaid-cli"


class RenderEngine(ABC):
    """Capability that renders diagram source into image bytes.

    Engines can be used as async context managers; leaving the context
    releases whatever the engine holds (browsers, temporary files).

    """

    name: str = "engine"

    @abstractmethod
    async def render(self, source: str) -> bytes:
        """Render one diagram.

        Parameters
        ----------
        source : str
            Diagram source text

        Returns
        -------
        bytes
            Encoded image

        Raises
        ------
        RenderError
            If the diagram is invalid or the engine fails

        """

    async def aclose(self) -> None:
        """Release resources held by the engine."""
        return None

    async def __aenter__(self) -> RenderEngine:
        """Enter the async context."""
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        """Close the engine on context exit."""
        await self.aclose()


def _summarize_stderr(stderr: str) -> str:
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    for line in lines:
        if line.startswith("Error"):
            return line
    return lines[-1] if lines else "no output"


class MermaidCliEngine(RenderEngine):
    """Render engine backed by the Mermaid CLI.

    Parameters
    ----------
    options : MermaidCliOptions or None, default None
        Engine configuration

    Raises
    ------
    DependencyError
        If the ``mmdc`` executable cannot be found

    Examples
    --------
        >>> async with MermaidCliEngine(MermaidCliOptions(theme="dark")) as engine:
        ...     svg = await engine.render("graph TD; A-->B")

    """

    name = "mermaid-cli"

    def __init__(self, options: MermaidCliOptions | None = None):
        """Resolve the executable and prepare the engine."""
        validate_options_type(options, MermaidCliOptions, "MermaidCliEngine")
        self.options: MermaidCliOptions = options or MermaidCliOptions()
        self.executable = require_executable(
            "Mermaid CLI engine", self.options.executable, install_command=MMDC_INSTALL_COMMAND
        )
        self._config_dir: Optional[tempfile.TemporaryDirectory[str]] = None
        self._puppeteer_config: Optional[Path] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False

    def _get_semaphore(self) -> asyncio.Semaphore:
        # One semaphore per event loop so an engine can outlive asyncio.run()
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.options.max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    def _get_puppeteer_config(self) -> Optional[Path]:
        if not self.options.no_sandbox:
            return None
        if self._puppeteer_config is None:
            self._config_dir = tempfile.TemporaryDirectory(prefix="mdmermaid-config-")
            config_path = Path(self._config_dir.name) / "puppeteer.json"
            config_path.write_text(json.dumps({"args": list(DEFAULT_PUPPETEER_SANDBOX_ARGS)}), encoding="utf-8")
            self._puppeteer_config = config_path
        return self._puppeteer_config

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        """Build the ``mmdc`` command line for one diagram.

        Parameters
        ----------
        input_path : Path
            Diagram source file
        output_path : Path
            Image file to produce; its suffix selects the format

        Returns
        -------
        list of str
            Executable followed by its arguments

        """
        opts = self.options
        command = [
            self.executable,
            "-i",
            str(input_path),
            "-o",
            str(output_path),
            "-t",
            opts.theme,
            "-b",
            opts.background_color,
        ]
        if opts.width is not None:
            command += ["-w", str(opts.width)]
        if opts.height is not None:
            command += ["-H", str(opts.height)]
        if opts.scale is not None:
            command += ["-s", str(opts.scale)]

        puppeteer_config = self._get_puppeteer_config()
        if puppeteer_config is not None:
            command += ["-p", str(puppeteer_config)]

        command.append("-q")
        command.extend(opts.extra_args)
        return command

    @timed(logger, "Mermaid CLI render")
    async def render(self, source: str) -> bytes:
        """Render one diagram with ``mmdc``.

        Parameters
        ----------
        source : str
            Mermaid source text

        Returns
        -------
        bytes
            Contents of the produced image file

        Raises
        ------
        RenderError
            On a non-zero exit status, a timeout, or a missing output file

        """
        if self._closed:
            raise RenderError("Render engine has been closed")

        async with self._get_semaphore():
            with tempfile.TemporaryDirectory(prefix="mdmermaid-") as tmp:
                input_path = Path(tmp) / "diagram.mmd"
                output_path = Path(tmp) / f"diagram.{self.options.output_format}"
                await asyncio.to_thread(input_path.write_text, source, encoding="utf-8")

                command = self.build_command(input_path, output_path)
                logger.debug("Running %s", " ".join(command))
                returncode, stderr = await self._run(command)

                if returncode != 0:
                    raise RenderError(
                        f"mmdc exited with status {returncode}: {_summarize_stderr(stderr)}",
                        engine_output=stderr,
                    )

                try:
                    return await asyncio.to_thread(output_path.read_bytes)
                except OSError as e:
                    raise RenderError(
                        "mmdc reported success but produced no output file",
                        engine_output=stderr,
                        original_error=e,
                    ) from e

    async def _run(self, command: list[str]) -> tuple[int, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RenderError(f"Could not start {command[0]}: {e}", original_error=e) from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.options.timeout)
        except asyncio.TimeoutError as e:
            await self._kill(process)
            raise RenderError(
                f"Diagram rendering timed out after {self.options.timeout}s", original_error=e
            ) from e
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        return process.returncode if process.returncode is not None else -1, stderr.decode("utf-8", errors="replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    async def aclose(self) -> None:
        """Remove the temporary puppeteer configuration."""
        self._closed = True
        if self._config_dir is not None:
            self._config_dir.cleanup()
            self._config_dir = None
            self._puppeteer_config = None


class LazyRenderEngine(RenderEngine):
    """Engine that creates the real engine on the first render.

    Used to share one engine across several documents without requiring
    the executable when no document contains a diagram.

    Parameters
    ----------
    options : MermaidCliOptions or None, default None
        Options for the engine created on first use

    """

    name = "lazy"

    def __init__(self, options: MermaidCliOptions | None = None):
        """Store options; nothing is started until :meth:`render`."""
        self.options = options
        self._engine: Optional[RenderEngine] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def started(self) -> bool:
        """Whether the underlying engine has been created."""
        return self._engine is not None

    async def render(self, source: str) -> bytes:
        """Create the underlying engine if needed and render with it.

        Raises
        ------
        DependencyError
            If the underlying engine cannot be created
        RenderError
            If rendering fails

        """
        if self._engine is None:
            if self._lock is None:
                self._lock = asyncio.Lock()
            async with self._lock:
                if self._engine is None:
                    self._engine = create_engine(self.options)
        return await self._engine.render(source)

    async def aclose(self) -> None:
        """Close the underlying engine if it was created."""
        if self._engine is not None:
            await self._engine.aclose()
            self._engine = None


def create_engine(options: MermaidCliOptions | None = None) -> RenderEngine:
    """Create the default render engine.

    Parameters
    ----------
    options : MermaidCliOptions or None, default None
        Engine configuration

    Returns
    -------
    RenderEngine
        A new Mermaid CLI engine

    Raises
    ------
    DependencyError
        If the ``mmdc`` executable cannot be found

    """
    return MermaidCliEngine(options)
