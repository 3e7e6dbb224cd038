#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/parsers/__init__.py
"""Markdown parsing into the document tree."""

from mdmermaid.parsers.markdown import MarkdownToAstConverter, markdown_to_ast

__all__ = ["MarkdownToAstConverter", "markdown_to_ast"]
