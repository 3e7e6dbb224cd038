#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/rewriter.py
"""Construction of the nodes that replace a rendered diagram."""

from __future__ import annotations

from typing import Optional

from mdmermaid.ast.nodes import Definition, HTMLBlock, HTMLInline, ImageReference, SourceLocation
from mdmermaid.constants import DEFAULT_REFERENCE_STYLE, SIMPLE_MODE_TEMPLATE, ReferenceStyle
from mdmermaid.diagrams.metadata import DiagramMetadata


def build_replacement_pair(
    metadata: DiagramMetadata,
    url: str,
    reference_style: ReferenceStyle = DEFAULT_REFERENCE_STYLE,
    source_location: Optional[SourceLocation] = None,
) -> tuple[ImageReference, Definition]:
    """Build the image reference and definition for a rendered diagram.

    Both nodes share the lowercased name as identifier and are meant to be
    placed next to each other, reference first.

    Parameters
    ----------
    metadata : DiagramMetadata
        Parsed block annotation
    url : str
        URL of the rendered image
    reference_style : {"shortcut", "collapsed", "full"}, default "shortcut"
        Reference syntax to use
    source_location : SourceLocation or None, default None
        Location of the replaced block, copied onto both nodes

    Returns
    -------
    tuple of (ImageReference, Definition)
        The replacement pair

    Examples
    --------
    >>> ref, definition = build_replacement_pair(DiagramMetadata("example.svg", "Example_Diagram"), "example.svg")
    >>> ref.identifier, ref.alt, definition.url, definition.title
    ('example_diagram', 'Example_Diagram', 'example.svg', None)

    """
    reference = ImageReference(
        identifier=metadata.identifier,
        label=metadata.name,
        reference_type=reference_style,
        alt=metadata.alt or metadata.name,
        source_location=source_location,
    )
    definition = Definition(
        identifier=metadata.identifier,
        label=metadata.name,
        url=url,
        title=metadata.alt,
        source_location=source_location,
    )
    return reference, definition


def build_html_placeholder(
    source: str, source_location: Optional[SourceLocation] = None, inline: bool = False
) -> HTMLBlock | HTMLInline:
    """Wrap diagram source in a ``<div class="mermaid">`` element for client-side rendering.

    Parameters
    ----------
    source : str
        Diagram source text
    source_location : SourceLocation or None, default None
        Location of the replaced node
    inline : bool, default False
        Produce inline HTML, for replacing a link inside a paragraph

    Returns
    -------
    HTMLBlock or HTMLInline
        The placeholder

    """
    content = SIMPLE_MODE_TEMPLATE.format(source=source.strip())
    if inline:
        return HTMLInline(content=content, source_location=source_location)
    return HTMLBlock(content=content, source_location=source_location)
