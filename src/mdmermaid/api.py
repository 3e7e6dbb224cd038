#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/api.py
"""High-level entry points.

The typical flow is parse, render diagrams, serialize::

    >>> from mdmermaid import process
    >>> source = process(Path("README.md").read_text(), path="README.md")
    >>> print(source.contents)

:func:`aprocess` is the coroutine behind :func:`process` for callers that
already run an event loop. Both return the :class:`~mdmermaid.diagnostics.SourceFile`
that carries the output text and every diagnostic raised along the way.

"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from mdmermaid.ast import Document
from mdmermaid.diagnostics import SourceFile
from mdmermaid.diagrams.transform import render_diagrams
from mdmermaid.exceptions import FileAccessError, FileNotFoundError, OutputWriteError, ParsingError
from mdmermaid.options.markdown import MarkdownParserOptions, MarkdownRendererOptions
from mdmermaid.options.mermaid import MermaidOptions
from mdmermaid.parsers.markdown import MarkdownToAstConverter
from mdmermaid.renderers.markdown import MarkdownRenderer

logger = logging.getLogger(__name__)

SourceInput = Union[str, bytes, Path]


def to_ast(source: SourceInput, parser_options: MarkdownParserOptions | None = None) -> Document:
    r"""Parse Markdown into a document tree.

    Parameters
    ----------
    source : str, bytes or Path
        Markdown text, UTF-8 bytes, or a path to a Markdown file
    parser_options : MarkdownParserOptions or None, default None
        Parser configuration

    Returns
    -------
    Document
        The parsed tree

    Examples
    --------
    >>> doc = to_ast("```mermaid file=a.svg name=A\ngraph TD; A-->B\n```\n")
    >>> doc.children[0].language
    'mermaid'

    """
    return MarkdownToAstConverter(parser_options).parse(source)


def to_markdown(document: Document, renderer_options: MarkdownRendererOptions | None = None) -> str:
    """Serialize a document tree to Markdown.

    Parameters
    ----------
    document : Document
        Tree to serialize
    renderer_options : MarkdownRendererOptions or None, default None
        Formatting options

    Returns
    -------
    str
        Markdown text

    """
    return MarkdownRenderer(renderer_options).render_to_string(document)


async def _read_source(path: Path) -> str:
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParsingError(f"{path} is not UTF-8 text: {e}", str(path), e) from e
    except OSError as e:
        if not path.exists():
            raise FileNotFoundError(str(path), original_error=e) from e
        raise FileAccessError(str(path), original_error=e) from e


async def aprocess(
    source: SourceInput,
    *,
    path: Optional[Union[str, Path]] = None,
    cwd: Optional[Union[str, Path]] = None,
    options: MermaidOptions | None = None,
    parser_options: MarkdownParserOptions | None = None,
    renderer_options: MarkdownRendererOptions | None = None,
    source_file: SourceFile | None = None,
) -> SourceFile:
    """Parse a document, render its diagrams and serialize the result.

    Parameters
    ----------
    source : str, bytes or Path
        Markdown text, or a path to read it from (which also becomes the
        document path when ``path`` is not given)
    path : str, Path or None, default None
        Location of the document; diagram files and URLs are relative to
        its directory
    cwd : str, Path or None, default None
        Base for relative paths; the current directory when omitted
    options : MermaidOptions or None, default None
        Diagram pass configuration. When it holds no engine, one is created
        on demand and closed before returning
    parser_options : MarkdownParserOptions or None, default None
        Parser configuration
    renderer_options : MarkdownRendererOptions or None, default None
        Serializer configuration. When omitted, frontmatter is written back
        in the format it was read in
    source_file : SourceFile or None, default None
        Existing record to fill in; ``path`` and ``cwd`` are ignored when given

    Returns
    -------
    SourceFile
        Record with the output in ``contents`` and the diagnostics in
        ``messages``

    Raises
    ------
    FileNotFoundError, FileAccessError
        If ``source`` is a path that cannot be read
    ParsingError
        If the input is not valid UTF-8
    DependencyError
        If a diagram needs rendering and the engine is not installed
    RenderError, OutputWriteError
        Only with ``options.fail_on_render_error``

    """
    if isinstance(source, Path):
        if path is None:
            path = source
        source = await _read_source(source)

    if source_file is None:
        source_file = SourceFile(path=Path(path) if path is not None else None, cwd=Path(cwd) if cwd else Path.cwd())

    converter = MarkdownToAstConverter(parser_options)
    document = converter.parse(source)

    if renderer_options is None and converter.frontmatter_format:
        renderer_options = MarkdownRendererOptions(metadata_format=converter.frontmatter_format)

    result = await render_diagrams(document, source_file, options)

    source_file.contents = to_markdown(result, renderer_options)
    logger.debug("Processed %s: %d message(s)", source_file.display_name, len(source_file.messages))
    return source_file


def process(source: SourceInput, **kwargs: object) -> SourceFile:
    """Run :func:`aprocess` on a new event loop.

    Takes the same arguments as :func:`aprocess`. Cannot be called from a
    running event loop; await :func:`aprocess` there instead.
    """
    return asyncio.run(aprocess(source, **kwargs))  # type: ignore[arg-type]


async def write_output(target: Union[str, Path], contents: str) -> Path:
    """Write a processed document as UTF-8 without blocking the event loop.

    Raises
    ------
    OutputWriteError
        If the file cannot be written

    """
    target = Path(target)
    try:
        await asyncio.to_thread(target.write_text, contents, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(str(target), original_error=e) from e

    logger.info("Wrote %s", target)
    return target


async def aprocess_file(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    **kwargs: object,
) -> SourceFile:
    """Process a Markdown file and write the result.

    Parameters
    ----------
    input_path : str or Path
        Document to read
    output_path : str, Path or None, default None
        Where to write the output; the input file is overwritten when omitted
    **kwargs
        Passed to :func:`aprocess`

    Returns
    -------
    SourceFile
        The processed record

    Raises
    ------
    OutputWriteError
        If the output cannot be written

    """
    input_path = Path(input_path)
    source_file = await aprocess(input_path, **kwargs)  # type: ignore[arg-type]
    await write_output(output_path if output_path is not None else input_path, source_file.contents or "")
    return source_file


def process_file(
    input_path: Union[str, Path], output_path: Optional[Union[str, Path]] = None, **kwargs: object
) -> SourceFile:
    """Synchronous form of :func:`aprocess_file`."""
    return asyncio.run(aprocess_file(input_path, output_path, **kwargs))
