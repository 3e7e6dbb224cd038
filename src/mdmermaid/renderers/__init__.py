#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/renderers/__init__.py
"""Document tree renderers."""

from mdmermaid.renderers.base import BaseRenderer, InlineContentMixin
from mdmermaid.renderers.markdown import MarkdownRenderer, ast_to_markdown

__all__ = ["BaseRenderer", "InlineContentMixin", "MarkdownRenderer", "ast_to_markdown"]
