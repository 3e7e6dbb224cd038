#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for diagram rendering."""
# src/mdmermaid/options/mermaid.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from mdmermaid.constants import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_DIAGRAM_MARKER,
    DEFAULT_DIAGRAM_OUTPUT_FORMAT,
    DEFAULT_LINK_TITLE_MARKER,
    DEFAULT_MERMAID_THEME,
    DEFAULT_MMDC_EXECUTABLE,
    DEFAULT_REFERENCE_STYLE,
    DEFAULT_RENDER_CONCURRENCY,
    DiagramOutputFormat,
    MermaidTheme,
    ReferenceStyle,
)
from mdmermaid.options.base import CloneFrozenMixin

if TYPE_CHECKING:
    from mdmermaid.diagrams.engine import RenderEngine


@dataclass(frozen=True)
class MermaidCliOptions(CloneFrozenMixin):
    """Options for the Mermaid CLI (``mmdc``) render engine.

    Parameters
    ----------
    executable : str, default "mmdc"
        Name or path of the Mermaid CLI executable.
    output_format : {"svg", "png", "pdf"}, default "svg"
        Format ``mmdc`` writes.
    theme : {"default", "forest", "dark", "neutral"}, default "default"
        Mermaid theme.
    background_color : str, default "white"
        Background color passed with ``-b``; ``transparent`` is accepted.
    width : int or None, default None
        Page width in pixels.
    height : int or None, default None
        Page height in pixels.
    scale : float or None, default None
        Puppeteer scale factor.
    no_sandbox : bool, default True
        Launch the headless browser with ``--no-sandbox``.
    timeout : float or None, default None
        Seconds to wait for one diagram before giving up.
    max_concurrency : int, default 4
        Maximum number of ``mmdc`` processes running at once.
    extra_args : tuple of str, default ()
        Additional arguments appended to every invocation.

    """

    executable: str = field(
        default=DEFAULT_MMDC_EXECUTABLE,
        metadata={"help": "Mermaid CLI executable name or path"},
    )
    output_format: DiagramOutputFormat = field(
        default=DEFAULT_DIAGRAM_OUTPUT_FORMAT,
        metadata={"help": "Rendered image format", "choices": ["svg", "png", "pdf"]},
    )
    theme: MermaidTheme = field(
        default=DEFAULT_MERMAID_THEME,
        metadata={
            "help": "Mermaid theme",
            "choices": ["default", "forest", "dark", "neutral"],
        },
    )
    background_color: str = field(
        default=DEFAULT_BACKGROUND_COLOR,
        metadata={"help": "Background color (e.g. 'white', 'transparent', '#F0F0F0')"},
    )
    width: Optional[int] = field(
        default=None,
        metadata={"help": "Page width in pixels"},
    )
    height: Optional[int] = field(
        default=None,
        metadata={"help": "Page height in pixels"},
    )
    scale: Optional[float] = field(
        default=None,
        metadata={"help": "Puppeteer scale factor"},
    )
    no_sandbox: bool = field(
        default=True,
        metadata={"help": "Launch the headless browser without its sandbox"},
    )
    timeout: Optional[float] = field(
        default=None,
        metadata={"help": "Seconds to wait for a single diagram"},
    )
    max_concurrency: int = field(
        default=DEFAULT_RENDER_CONCURRENCY,
        metadata={"help": "Maximum number of concurrent mmdc processes"},
    )
    extra_args: tuple[str, ...] = field(
        default=(),
        metadata={"help": "Additional arguments passed to every mmdc invocation"},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if not self.executable:
            raise ValueError("executable must not be empty")
        if self.output_format not in ("svg", "png", "pdf"):
            raise ValueError(f"output_format must be one of svg, png, pdf, got {self.output_format!r}")
        if self.theme not in ("default", "forest", "dark", "neutral"):
            raise ValueError(f"Unknown Mermaid theme: {self.theme!r}")
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.scale is not None and self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")


@dataclass(frozen=True)
class MermaidOptions(CloneFrozenMixin):
    """Options for the diagram rendering pass.

    Parameters
    ----------
    engine : RenderEngine or None, default None
        Already initialized engine to reuse. When None, an engine is created
        from ``engine_options`` on the first diagram that needs one. An engine
        passed here is never closed by the pass.
    engine_options : MermaidCliOptions
        Options used when the engine has to be created.
    output_dir : str, Path or None, default None
        Directory rendered files are written to. Defaults to the
        destination directory recorded on the source file, then the
        document's own directory.
    diagram_marker : str, default "mermaid"
        Code block language that marks a diagram.
    reference_style : {"shortcut", "collapsed", "full"}, default "shortcut"
        How the image reference replacing a diagram is written. The
        ``shortcut`` and ``collapsed`` forms print the diagram name as the
        image text, so a block's ``alt`` only survives as the definition
        title. Use ``full`` to write ``alt`` as the image text.
    fail_on_render_error : bool, default False
        Abort the whole pass on the first render or write failure instead of
        reporting a warning and keeping the code block.
    absolute_urls : bool, default False
        Use the absolute path of the rendered file as the definition URL.
    create_output_dirs : bool, default False
        Create missing directories for rendered files.
    render_links : bool, default False
        Also render diagram source files referenced by links and images whose
        title equals ``link_title_marker``.
    link_title_marker : str, default "mermaid:"
        Title marking a link or image as pointing at a diagram source file.
    simple : bool, default False
        Do not render; wrap diagram sources in ``<div class="mermaid">`` for
        client-side rendering instead.

    """

    engine: Optional[RenderEngine] = field(
        default=None,
        compare=False,
        repr=False,
        metadata={"help": "Render engine instance to reuse", "exclude_from_config": True},
    )
    engine_options: MermaidCliOptions = field(
        default_factory=MermaidCliOptions,
        metadata={"help": "Options for the Mermaid CLI engine"},
    )
    output_dir: Optional[Union[str, Path]] = field(
        default=None,
        metadata={"help": "Directory rendered diagrams are written to"},
    )
    diagram_marker: str = field(
        default=DEFAULT_DIAGRAM_MARKER,
        metadata={"help": "Code block language identifying diagrams"},
    )
    reference_style: ReferenceStyle = field(
        default=DEFAULT_REFERENCE_STYLE,
        metadata={
            "help": "Image reference syntax for rendered diagrams; only 'full' writes alt as the image text",
            "choices": ["shortcut", "collapsed", "full"],
        },
    )
    fail_on_render_error: bool = field(
        default=False,
        metadata={"help": "Abort on the first diagram that fails to render"},
    )
    absolute_urls: bool = field(
        default=False,
        metadata={"help": "Write absolute paths into image definitions"},
    )
    create_output_dirs: bool = field(
        default=False,
        metadata={"help": "Create missing output directories"},
    )
    render_links: bool = field(
        default=False,
        metadata={"help": "Render diagram files referenced by links titled with the link marker"},
    )
    link_title_marker: str = field(
        default=DEFAULT_LINK_TITLE_MARKER,
        metadata={"help": "Link title marking a diagram source file"},
    )
    simple: bool = field(
        default=False,
        metadata={"help": "Emit <div class=\"mermaid\"> blocks instead of rendering"},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If any field value is invalid.

        """
        if not self.diagram_marker or any(ch.isspace() for ch in self.diagram_marker):
            raise ValueError(f"diagram_marker must be a single non-empty word, got {self.diagram_marker!r}")
        if self.reference_style not in ("shortcut", "collapsed", "full"):
            raise ValueError(
                f"reference_style must be one of shortcut, collapsed, full, got {self.reference_style!r}"
            )
        if not self.link_title_marker:
            raise ValueError("link_title_marker must not be empty")
        if not isinstance(self.engine_options, MermaidCliOptions):
            raise ValueError(
                f"engine_options must be MermaidCliOptions, got {type(self.engine_options).__name__}"
            )
