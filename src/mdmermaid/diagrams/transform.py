#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/transform.py
"""The diagram rendering pass.

:class:`MermaidRenderTransform` walks a document with the concurrent
splicing traversal of :class:`~mdmermaid.ast.transforms.AsyncNodeTransformer`
and replaces every diagram code block::

    ```mermaid file=example.svg name=Example_Diagram
    graph TD; A-->B
    ```

with an image reference followed by its definition::

    ![Example_Diagram]

    [Example_Diagram]: example.svg

Blocks without both ``file`` and ``name`` are left alone. A diagram that
fails to render or cannot be written becomes a warning on the document's
:class:`~mdmermaid.diagnostics.SourceFile` and keeps its code block, unless
``fail_on_render_error`` is set, in which case the whole pass aborts.

Examples
--------
    >>> doc = markdown_to_ast(text)
    >>> source = SourceFile(path=Path("README.md"))
    >>> new_doc = asyncio.run(render_diagrams(doc, source, MermaidOptions()))
    >>> for message in source.messages:
    ...     print(message)

"""

from __future__ import annotations

import asyncio
import builtins
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from mdmermaid.ast.nodes import CodeBlock, Document, Image, Link, Node
from mdmermaid.ast.transforms import AsyncNodeTransformer
from mdmermaid.constants import PLUGIN_NAME
from mdmermaid.diagnostics import SourceFile
from mdmermaid.diagrams.engine import RenderEngine, create_engine
from mdmermaid.diagrams.invoker import hashed_file_name, render_to_file
from mdmermaid.diagrams.metadata import IncompleteMetadata, parse_diagram_metadata
from mdmermaid.diagrams.rewriter import build_html_placeholder, build_replacement_pair
from mdmermaid.exceptions import FileAccessError, FileNotFoundError, OutputWriteError, RenderError
from mdmermaid.options.base import validate_options_type
from mdmermaid.options.mermaid import MermaidOptions
from mdmermaid.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

# Failures that affect a single diagram and leave the rest of the pass running
RECOVERABLE_ERRORS = (RenderError, OutputWriteError, FileNotFoundError, FileAccessError)


class MermaidRenderTransform(AsyncNodeTransformer):
    """Render diagram blocks and splice in image references.

    Parameters
    ----------
    options : MermaidOptions or None, default None
        Pass configuration
    source_file : SourceFile or None, default None
        Document location and diagnostics sink; a path-less file rooted at
        the current directory is used when omitted

    Attributes
    ----------
    rendered_count : int
        Number of diagrams replaced so far
    failed_count : int
        Number of diagrams left in place because of a failure

    Notes
    -----
    The engine from ``options.engine`` is used when given. Otherwise one is
    created on the first diagram that needs it, and :meth:`aclose` closes it.
    An engine supplied by the caller is never closed here.

    """

    transform_name = "mermaid"

    def __init__(self, options: MermaidOptions | None = None, source_file: SourceFile | None = None):
        """Initialize the pass with options and a diagnostics sink."""
        validate_options_type(options, MermaidOptions, "MermaidRenderTransform")
        self.options: MermaidOptions = options or MermaidOptions()
        self.source_file = source_file if source_file is not None else SourceFile()
        self._engine: Optional[RenderEngine] = self.options.engine
        self._owns_engine = False
        self._engine_lock: Optional[asyncio.Lock] = None
        self.rendered_count = 0
        self.failed_count = 0

    async def get_engine(self) -> RenderEngine:
        """Return the shared engine, creating it on first use.

        Raises
        ------
        DependencyError
            If the engine's executable is not installed

        """
        if self._engine is not None:
            return self._engine

        if self._engine_lock is None:
            self._engine_lock = asyncio.Lock()

        # Concurrent branches race here; only the first creates the engine
        async with self._engine_lock:
            if self._engine is None:
                logger.debug("Creating render engine")
                self._engine = create_engine(self.options.engine_options)
                self._owns_engine = True

        return self._engine

    async def aclose(self) -> None:
        """Close the engine if this pass created it."""
        if self._owns_engine and self._engine is not None:
            await self._engine.aclose()
            self._engine = None
            self._owns_engine = False

    def is_diagram_block(self, node: Node) -> bool:
        """Whether ``node`` is a code block in the diagram language."""
        return isinstance(node, CodeBlock) and node.language == self.options.diagram_marker

    def is_diagram_link(self, node: Node) -> bool:
        """Whether ``node`` is a link or image pointing at a diagram source file."""
        return isinstance(node, (Link, Image)) and node.title == self.options.link_title_marker

    @property
    def output_dir(self) -> Path:
        """Directory rendered files are written to."""
        if self.options.output_dir is not None:
            return self.source_file.cwd / Path(self.options.output_dir)
        return self.source_file.destination_dir

    def artifact_url(self, path: Path) -> str:
        """URL written into the definition for a rendered file.

        Relative to the document's directory unless ``absolute_urls`` is set
        or no relative path exists (e.g. a different drive on Windows).
        """
        if self.options.absolute_urls:
            return path.as_posix()
        base = self.source_file.dirname.resolve()
        try:
            return Path(os.path.relpath(path, base)).as_posix()
        except ValueError:
            return path.as_posix()

    async def transform_node(self, node: Node) -> list[Node]:
        """Replace diagram blocks (and marked links) in the tree."""
        if self.is_diagram_block(node):
            assert isinstance(node, CodeBlock)
            return await self._transform_block(node)

        if self.options.render_links and self.is_diagram_link(node):
            assert isinstance(node, (Link, Image))
            return await self._transform_link(node)

        return [node]

    def _recover(self, node: Node, error: Exception) -> list[Node]:
        if self.options.fail_on_render_error:
            raise error
        self.failed_count += 1
        self.source_file.message(error, node.source_location, PLUGIN_NAME)
        return [node]

    async def _transform_block(self, node: CodeBlock) -> list[Node]:
        if self.options.simple:
            self.source_file.info("mermaid code block replaced with div", node.source_location, PLUGIN_NAME)
            return [build_html_placeholder(node.content, node.source_location)]

        metadata = parse_diagram_metadata(node.meta)
        if isinstance(metadata, IncompleteMetadata):
            logger.debug(
                "Leaving %s block at %s unchanged: missing %s",
                self.options.diagram_marker,
                node.source_location or "unknown position",
                ", ".join(metadata.missing),
            )
            return [node]

        engine = await self.get_engine()
        try:
            path = await render_to_file(
                engine,
                node.content,
                self.output_dir,
                metadata.file,
                create_dirs=self.options.create_output_dirs,
            )
        except RECOVERABLE_ERRORS as e:
            return self._recover(node, e)

        self.rendered_count += 1
        self.source_file.info("mermaid code block replaced with graph", node.source_location, PLUGIN_NAME)
        reference, definition = build_replacement_pair(
            metadata, self.artifact_url(path), self.options.reference_style, node.source_location
        )
        return [reference, definition]

    async def _read_linked_source(self, url: str) -> str:
        path = self.source_file.dirname / url
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except builtins.FileNotFoundError as e:
            raise FileNotFoundError(str(path), original_error=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(str(path), message=f"Cannot read diagram source {path}: {e}", original_error=e) from e

    async def _transform_link(self, node: Union[Link, Image]) -> list[Node]:
        try:
            source = await self._read_linked_source(node.url)
        except RECOVERABLE_ERRORS as e:
            return self._recover(node, e)

        if self.options.simple:
            self.source_file.info("mermaid link replaced with div", node.source_location, PLUGIN_NAME)
            return [build_html_placeholder(source, node.source_location, inline=True)]

        engine = await self.get_engine()
        file_name = hashed_file_name(source, self.options.engine_options.output_format)
        try:
            path = await render_to_file(
                engine, source, self.output_dir, file_name, create_dirs=self.options.create_output_dirs
            )
        except RECOVERABLE_ERRORS as e:
            return self._recover(node, e)

        self.rendered_count += 1
        self.source_file.info("mermaid link replaced with link to graph", node.source_location, PLUGIN_NAME)
        # Only the target changes; a link stays a link and keeps its text and title
        return [replace(node, url=self.artifact_url(path))]


async def render_diagrams(
    document: Document,
    source_file: SourceFile | None = None,
    options: MermaidOptions | None = None,
) -> Document:
    """Render every diagram in ``document``.

    Parameters
    ----------
    document : Document
        Parsed document
    source_file : SourceFile or None, default None
        Document location and diagnostics sink
    options : MermaidOptions or None, default None
        Pass configuration

    Returns
    -------
    Document
        New document with diagrams replaced; ``document`` itself is unchanged

    Raises
    ------
    TransformError
        If the tree cannot be rebuilt
    DependencyError
        If a diagram needs rendering and the engine is not installed
    RenderError, OutputWriteError
        Only with ``fail_on_render_error=True``

    """
    transform = MermaidRenderTransform(options, source_file)
    try:
        with debug_timer(logger, "Diagram pass"):
            result = await transform.transform_document(document)
    finally:
        await transform.aclose()

    logger.info("Rendered %d diagram(s), %d left unchanged after errors", transform.rendered_count, transform.failed_count)
    return result
