#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/__init__.py
"""Diagram discovery, rendering and replacement.

- metadata: parsing of ``key=value`` block annotations
- engine: render engines (the Mermaid CLI adapter)
- invoker: rendering a diagram to a file
- rewriter: replacement nodes for rendered diagrams
- transform: the document pass tying these together
"""

from mdmermaid.diagrams.engine import LazyRenderEngine, MermaidCliEngine, RenderEngine, create_engine
from mdmermaid.diagrams.invoker import hashed_file_name, render_to_file
from mdmermaid.diagrams.metadata import (
    DiagramMetadata,
    IncompleteMetadata,
    ParsedMetadata,
    parse_diagram_metadata,
    parse_meta,
)
from mdmermaid.diagrams.rewriter import build_html_placeholder, build_replacement_pair
from mdmermaid.diagrams.transform import MermaidRenderTransform, render_diagrams

__all__ = [
    "RenderEngine",
    "MermaidCliEngine",
    "LazyRenderEngine",
    "create_engine",
    "render_to_file",
    "hashed_file_name",
    "DiagramMetadata",
    "IncompleteMetadata",
    "ParsedMetadata",
    "parse_meta",
    "parse_diagram_metadata",
    "build_replacement_pair",
    "build_html_placeholder",
    "MermaidRenderTransform",
    "render_diagrams",
]
