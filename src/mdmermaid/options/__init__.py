#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Option dataclasses for parsing, rendering and the diagram pass."""

from mdmermaid.options.base import BaseParserOptions, BaseRendererOptions, CloneFrozenMixin
from mdmermaid.options.markdown import MarkdownParserOptions, MarkdownRendererOptions
from mdmermaid.options.mermaid import MermaidCliOptions, MermaidOptions

__all__ = [
    "CloneFrozenMixin",
    "BaseParserOptions",
    "BaseRendererOptions",
    "MarkdownParserOptions",
    "MarkdownRendererOptions",
    "MermaidCliOptions",
    "MermaidOptions",
]
