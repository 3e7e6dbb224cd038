#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for Markdown parsing and rendering."""
# src/mdmermaid/options/markdown.py


from __future__ import annotations

from dataclasses import dataclass, field

from mdmermaid.constants import (
    DEFAULT_BULLET_SYMBOLS,
    DEFAULT_CODE_FENCE_CHAR,
    DEFAULT_CODE_FENCE_MIN,
    DEFAULT_EMPHASIS_SYMBOL,
    DEFAULT_LIST_INDENT_WIDTH,
    DEFAULT_METADATA_FORMAT,
    CodeFenceChar,
    EmphasisSymbol,
    MetadataFormatType,
)
from mdmermaid.options.base import BaseParserOptions, BaseRendererOptions


@dataclass(frozen=True)
class MarkdownParserOptions(BaseParserOptions):
    """Configuration options for Markdown-to-tree parsing.

    Parameters
    ----------
    parse_tables : bool, default True
        Whether to parse GFM pipe tables.
    parse_footnotes : bool, default True
        Whether to parse footnote references and definitions.
    parse_task_lists : bool, default True
        Whether to parse task list checkboxes (- [ ] and - [x]).
    parse_strikethrough : bool, default True
        Whether to parse strikethrough syntax (~~text~~).
    parse_frontmatter : bool, default True
        Whether to read YAML (``---``) or TOML (``+++``) frontmatter.

    """

    parse_tables: bool = field(
        default=True,
        metadata={"help": "Parse table syntax (GFM pipe tables)"},
    )
    parse_footnotes: bool = field(
        default=True,
        metadata={"help": "Parse footnote references and definitions"},
    )
    parse_task_lists: bool = field(
        default=True,
        metadata={"help": "Parse task list checkboxes (- [ ] and - [x])"},
    )
    parse_strikethrough: bool = field(
        default=True,
        metadata={"help": "Parse strikethrough syntax (~~text~~)"},
    )
    parse_frontmatter: bool = field(
        default=True,
        metadata={"help": "Parse YAML/TOML frontmatter at document start"},
    )


@dataclass(frozen=True)
class MarkdownRendererOptions(BaseRendererOptions):
    r"""Options controlling how a document tree is written back to Markdown.

    Parameters
    ----------
    escape_special : bool, default True
        Whether to escape special Markdown characters in text content.
    emphasis_symbol : {"\*", "\_"}, default "\*"
        Symbol to use for emphasis.
    bullet_symbols : str, default "\*-+"
        Characters to cycle through for nested bullet lists.
    list_indent_width : int, default 4
        Spaces per level of list indentation.
    code_fence_char : {"`", "~"}, default "`"
        Character to use for code fences.
    code_fence_min : int, default 3
        Minimum length for code fences.
    include_frontmatter : bool, default True
        Re-emit document metadata as frontmatter.
    metadata_format : {"yaml", "toml"}, default "yaml"
        Frontmatter format when ``include_frontmatter`` is set.

    """

    escape_special: bool = field(
        default=True,
        metadata={"help": "Escape special Markdown characters in text content"},
    )
    emphasis_symbol: EmphasisSymbol = field(
        default=DEFAULT_EMPHASIS_SYMBOL,
        metadata={"help": "Symbol to use for emphasis/italic formatting", "choices": ["*", "_"]},
    )
    bullet_symbols: str = field(
        default=DEFAULT_BULLET_SYMBOLS,
        metadata={"help": "Characters to cycle through for nested bullet lists"},
    )
    list_indent_width: int = field(
        default=DEFAULT_LIST_INDENT_WIDTH,
        metadata={"help": "Number of spaces for each level of list indentation"},
    )
    code_fence_char: CodeFenceChar = field(
        default=DEFAULT_CODE_FENCE_CHAR,
        metadata={"help": "Character to use for code fences", "choices": ["`", "~"]},
    )
    code_fence_min: int = field(
        default=DEFAULT_CODE_FENCE_MIN,
        metadata={"help": "Minimum length for code fences (typically 3)"},
    )
    include_frontmatter: bool = field(
        default=True,
        metadata={"help": "Write document metadata back as frontmatter"},
    )
    metadata_format: MetadataFormatType = field(
        default=DEFAULT_METADATA_FORMAT,
        metadata={"help": "Frontmatter format", "choices": ["yaml", "toml"]},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.emphasis_symbol not in ("*", "_"):
            raise ValueError(f"emphasis_symbol must be '*' or '_', got {self.emphasis_symbol!r}")
        if not self.bullet_symbols:
            raise ValueError("bullet_symbols must not be empty")
        if self.list_indent_width < 1:
            raise ValueError(f"list_indent_width must be at least 1, got {self.list_indent_width}")
        if self.code_fence_char not in ("`", "~"):
            raise ValueError(f"code_fence_char must be '`' or '~', got {self.code_fence_char!r}")
        if self.code_fence_min < 3:
            raise ValueError(f"code_fence_min must be at least 3, got {self.code_fence_min}")
        if self.metadata_format not in ("yaml", "toml"):
            raise ValueError(f"metadata_format must be 'yaml' or 'toml', got {self.metadata_format!r}")
