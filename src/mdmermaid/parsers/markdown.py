#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/parsers/markdown.py
"""Markdown to document tree converter.

This module builds a :class:`~mdmermaid.ast.Document` from Markdown text
using the mistune parser. Code blocks keep the complete fence info string:
its first word becomes ``CodeBlock.language`` and the rest becomes
``CodeBlock.meta``, which is where diagram annotations live.

Code blocks and links carry a :class:`~mdmermaid.ast.SourceLocation` with
the line and column of their first character in the original text
(frontmatter included), so diagnostics can point back at them.

"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Literal, Optional, Union

import mistune

from mdmermaid.ast import (
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Heading,
    HTMLBlock,
    HTMLInline,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    SourceLocation,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from mdmermaid.constants import MetadataFormatType
from mdmermaid.exceptions import FileAccessError, FileNotFoundError, ParsingError
from mdmermaid.options.base import validate_options_type
from mdmermaid.options.markdown import MarkdownParserOptions
from mdmermaid.utils.decorators import debug_timer
from mdmermaid.utils.frontmatter import split_frontmatter

logger = logging.getLogger(__name__)

_FOOTNOTE_LABEL_RE = re.compile(r"\[\^([^\]\s][^\]]*)\]")


class MarkdownToAstConverter:
    r"""Convert Markdown to a document tree.

    Parameters
    ----------
    options : MarkdownParserOptions or None, default = None
        Parser configuration options

    Attributes
    ----------
    frontmatter_format : {"yaml", "toml"} or None
        Format of the frontmatter found by the last :meth:`parse` call

    Examples
    --------
        >>> converter = MarkdownToAstConverter()
        >>> doc = converter.parse("# Hello\n\n```mermaid file=a.svg name=A\ngraph TD; A-->B\n```\n")
        >>> doc.children[1].meta
        'file=a.svg name=A'

    """

    def __init__(self, options: MarkdownParserOptions | None = None):
        """Initialize the Markdown parser with options."""
        validate_options_type(options, MarkdownParserOptions, "markdown parser")
        self.options: MarkdownParserOptions = options or MarkdownParserOptions()
        self.frontmatter_format: Optional[MetadataFormatType] = None
        self._footnote_definitions: dict[str, list[Node]] = {}
        self._footnote_labels: dict[str, str] = {}
        self._source = ""
        self._cursor = 0
        self._line_offset = 0

    def parse(self, input_data: Union[str, bytes, Path]) -> Document:
        """Parse Markdown input into a Document.

        Parameters
        ----------
        input_data : str, bytes or Path
            Markdown text, UTF-8 encoded bytes, or a path to a Markdown file

        Returns
        -------
        Document
            Root of the parsed tree; frontmatter values are in its metadata

        Raises
        ------
        FileNotFoundError
            If a path is given and does not exist
        FileAccessError
            If a path is given and cannot be read
        ParsingError
            If the input is not valid UTF-8

        """
        markdown_content = self._load_text_content(input_data)

        # Reset parser state to prevent leakage across parse calls
        self._footnote_definitions = {}
        self._cursor = 0

        self.frontmatter_format = None
        self._line_offset = 0

        frontmatter_metadata: dict[str, Any] = {}
        if self.options.parse_frontmatter:
            frontmatter = split_frontmatter(markdown_content)
            markdown_content = frontmatter.body
            self._line_offset = frontmatter.line_count
            self.frontmatter_format = frontmatter.format
            if self.options.extract_metadata:
                frontmatter_metadata = frontmatter.data

        self._source = markdown_content
        self._footnote_labels = {}
        if self.options.parse_footnotes:
            self._collect_footnote_labels(markdown_content)

        plugins = []
        if self.options.parse_strikethrough:
            plugins.append("strikethrough")
        if self.options.parse_tables:
            plugins.append("table")
        if self.options.parse_footnotes:
            plugins.append("footnotes")
        if self.options.parse_task_lists:
            plugins.append("task_lists")

        # No renderer: mistune hands back its token stream
        markdown = mistune.create_markdown(plugins=plugins, renderer=None)

        with debug_timer(logger, "Parsing markdown"):
            tokens, _state = markdown.parse(markdown_content)
            children = self._process_tokens(tokens) if isinstance(tokens, list) else []

        for identifier, content in self._footnote_definitions.items():
            children.append(FootnoteDefinition(identifier=identifier, content=content))

        return Document(children=children, metadata=frontmatter_metadata)

    @staticmethod
    def _load_text_content(input_data: Union[str, bytes, Path]) -> str:
        if isinstance(input_data, bytes):
            try:
                return input_data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ParsingError(f"Input is not UTF-8 text: {e}", original_error=e) from e
        if isinstance(input_data, Path):
            try:
                return input_data.read_text(encoding="utf-8-sig")
            except UnicodeDecodeError as e:
                raise ParsingError(f"{input_data} is not UTF-8 text: {e}", str(input_data), e) from e
            except OSError as e:
                if not input_data.exists():
                    raise FileNotFoundError(str(input_data), original_error=e) from e
                raise FileAccessError(str(input_data), original_error=e) from e
        return input_data

    def _collect_footnote_labels(self, content: str) -> None:
        # mistune case-folds footnote keys; remember the first spelling of each
        for match in _FOOTNOTE_LABEL_RE.finditer(content):
            label = match.group(1)
            self._footnote_labels.setdefault(" ".join(label.split()).upper(), label)

    def _footnote_label(self, key: str) -> str:
        return self._footnote_labels.get(key, key)

    def _locate(self, needle: str) -> Optional[SourceLocation]:
        """Find ``needle`` at or after the cursor and return its position.

        Tokens are processed in document order, so searching forward from the
        previous match finds the occurrence belonging to the current token.
        """
        if not needle:
            return None
        pos = self._source.find(needle, self._cursor)
        if pos < 0:
            return None
        self._cursor = pos + len(needle)
        line_start = self._source.rfind("\n", 0, pos) + 1
        return SourceLocation(
            format="markdown",
            line=self._source.count("\n", 0, pos) + 1 + self._line_offset,
            column=pos - line_start + 1,
        )

    def _process_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        """Process a list of mistune block tokens into nodes."""
        nodes: list[Node] = []

        for token in tokens:
            node = self._process_token(token)
            if node is not None:
                if isinstance(node, list):
                    nodes.extend(node)
                else:
                    nodes.append(node)

        return nodes

    def _process_token(self, token: dict[str, Any]) -> Node | list[Node] | None:
        """Process a single mistune block token."""
        token_type = token.get("type", "")

        if token_type == "heading":
            return self._process_heading(token)
        elif token_type in ("paragraph", "block_text"):
            # block_text is used for tight list items
            return self._process_paragraph(token)
        elif token_type == "block_code":
            return self._process_code_block(token)
        elif token_type == "block_quote":
            return BlockQuote(children=self._process_tokens(token.get("children", [])))
        elif token_type == "list":
            return self._process_list(token)
        elif token_type == "table":
            return self._process_table(token)
        elif token_type == "thematic_break":
            return ThematicBreak()
        elif token_type == "block_html":
            return HTMLBlock(content=token.get("raw", ""))
        elif token_type == "footnote_def":
            self._process_footnote_item(token)
            return None
        elif token_type == "footnotes":
            for item in token.get("children", []):
                self._process_footnote_item(item)
            return None

        # blank_line and anything unknown
        return None

    def _process_heading(self, token: dict[str, Any]) -> Heading:
        attrs = token.get("attrs", {})
        level = attrs.get("level", 1) if isinstance(attrs, dict) else 1

        if not isinstance(level, int) or level < 1 or level > 6:
            level = 1

        children = token.get("children", [])
        content = self._process_inline_tokens(children) if isinstance(children, list) else []

        return Heading(level=level, content=content)

    def _process_paragraph(self, token: dict[str, Any]) -> Paragraph:
        return Paragraph(content=self._process_inline_tokens(token.get("children", [])))

    def _process_code_block(self, token: dict[str, Any]) -> CodeBlock:
        """Process a code block token.

        Parameters
        ----------
        token : dict
            Code block token with 'raw', 'style', 'marker' and optional 'attrs'

        Returns
        -------
        CodeBlock
            Code block with ``language`` and ``meta`` split from the info string

        """
        code_content = token.get("raw", "")
        attrs = token.get("attrs", {}) or {}
        info_string = (attrs.get("info") or "").strip()
        marker = token.get("marker") or ""

        metadata: dict[str, Any] = {}
        language = None
        meta = ""

        if info_string:
            metadata["info_string"] = info_string
            parts = info_string.split(maxsplit=1)
            language = parts[0]
            if len(parts) > 1:
                meta = parts[1]

        if marker:
            location = self._locate(marker)
            fence_char = marker[0]
            fence_length = len(marker)
        else:
            location = None
            fence_char = "`"
            fence_length = 3
            metadata["indented"] = True

        if code_content:
            # Skip past the body so fence-like lines inside it are not matched later.
            # Inside quotes and lists the body is not a verbatim substring; fall
            # back to its first and last lines.
            body_location = self._locate(code_content)
            if body_location is None:
                body_location = self._locate(code_content.split("\n", 1)[0])
                self._locate(code_content.rstrip("\n").split("\n")[-1])
            if location is None:
                location = body_location

        if marker:
            # Closing fence
            self._locate(marker)

        return CodeBlock(
            content=code_content,
            language=language,
            meta=meta,
            fence_char=fence_char,
            fence_length=fence_length,
            metadata=metadata,
            source_location=location,
        )

    def _process_list(self, token: dict[str, Any]) -> List:
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}

        ordered = attrs.get("ordered", False)
        start = attrs.get("start", 1)
        tight = token.get("tight", attrs.get("tight", True))

        children = token.get("children", [])
        if not isinstance(children, list):
            children = []

        items = [self._process_list_item(child) for child in children if isinstance(child, dict)]
        metadata = {"bullet": token["bullet"]} if token.get("bullet") else {}

        return List(ordered=ordered, items=items, start=start, tight=tight, metadata=metadata)

    def _process_list_item(self, token: dict[str, Any]) -> ListItem:
        content = self._process_tokens(token.get("children", []))

        task_status: Literal["checked", "unchecked"] | None = None
        attrs = token.get("attrs", {}) or {}
        if "checked" in attrs:
            task_status = "checked" if attrs["checked"] else "unchecked"

        return ListItem(children=content, task_status=task_status)

    def _process_table(self, token: dict[str, Any]) -> Table:
        header = None
        rows = []
        alignments = []

        for row_token in token.get("children", []):
            row_type = row_token.get("type", "")
            if row_type == "table_head":
                # Header cells are direct children of table_head
                cells = self._process_table_row_cells(row_token)
                header = TableRow(cells=cells, is_header=True)
                alignments = [cell.alignment for cell in cells]
            elif row_type == "table_body":
                for body_row_token in row_token.get("children", []):
                    rows.append(TableRow(cells=self._process_table_row_cells(body_row_token)))

        return Table(header=header, rows=rows, alignments=alignments)

    def _process_table_row_cells(self, row_token: dict[str, Any]) -> list[TableCell]:
        cells = []
        for cell_token in row_token.get("children", []):
            if cell_token.get("type") != "table_cell":
                continue
            content = self._process_inline_tokens(cell_token.get("children", []))
            alignment = (cell_token.get("attrs", {}) or {}).get("align", None)
            cells.append(TableCell(content=content, alignment=alignment))
        return cells

    def _process_footnote_item(self, token: dict[str, Any]) -> None:
        """Store a footnote definition for appending at the end of the document."""
        attrs = token.get("attrs", {}) or {}
        identifier = self._footnote_label(attrs.get("label") or attrs.get("key") or token.get("raw", ""))
        self._footnote_definitions[identifier] = self._process_tokens(token.get("children", []))

    def _process_inline_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        nodes: list[Node] = []

        for token in tokens:
            node = self._process_inline_token(token)
            if node is not None:
                nodes.append(node)

        return nodes

    def _handle_text_token(self, token: dict[str, Any]) -> Text:
        return Text(content=token.get("raw", ""))

    def _handle_strong_token(self, token: dict[str, Any]) -> Strong:
        return Strong(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_emphasis_token(self, token: dict[str, Any]) -> Emphasis:
        return Emphasis(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_codespan_token(self, token: dict[str, Any]) -> Code:
        return Code(content=token.get("raw", ""))

    def _handle_link_token(self, token: dict[str, Any]) -> Link:
        """Handle link token."""
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}
        url = attrs.get("url", "")
        title = attrs.get("title", None)
        children = token.get("children", [])
        if not isinstance(children, list):
            children = []
        content = self._process_inline_tokens(children)
        return Link(url=url, content=content, title=title, source_location=self._locate_inline(url))

    def _handle_image_token(self, token: dict[str, Any]) -> Image:
        """Handle image token; alt text comes from the text children."""
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}
        url = attrs.get("url", "")
        title = attrs.get("title", None)
        alt_text = "".join(
            child.get("raw", "")
            for child in token.get("children", []) or []
            if isinstance(child, dict) and child.get("type") == "text"
        )
        return Image(url=url, alt_text=alt_text, title=title, source_location=self._locate_inline(url))

    def _locate_inline(self, url: str) -> Optional[SourceLocation]:
        # Only inline destinations can be found; reference-style links keep no position
        return self._locate(f"]({url}") if url else None

    def _handle_linebreak_token(self, token: dict[str, Any]) -> LineBreak:
        return LineBreak(soft=False)

    def _handle_softbreak_token(self, token: dict[str, Any]) -> LineBreak:
        return LineBreak(soft=True)

    def _handle_strikethrough_token(self, token: dict[str, Any]) -> Strikethrough:
        return Strikethrough(content=self._process_inline_tokens(token.get("children", [])))

    def _handle_inline_html_token(self, token: dict[str, Any]) -> HTMLInline:
        return HTMLInline(content=token.get("raw", ""))

    def _handle_footnote_ref_token(self, token: dict[str, Any]) -> FootnoteReference:
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}
        identifier = self._footnote_label(attrs.get("label") or token.get("raw", ""))
        return FootnoteReference(identifier=identifier)

    def _process_inline_token(self, token: dict[str, Any]) -> Node | None:
        """Dispatch a single inline token to its handler."""
        token_type = token.get("type", "")

        handler_map: dict[str, Any] = {
            "text": self._handle_text_token,
            "strong": self._handle_strong_token,
            "emphasis": self._handle_emphasis_token,
            "codespan": self._handle_codespan_token,
            "link": self._handle_link_token,
            "image": self._handle_image_token,
            "linebreak": self._handle_linebreak_token,
            "softbreak": self._handle_softbreak_token,
            "strikethrough": self._handle_strikethrough_token,
            "inline_html": self._handle_inline_html_token,
            "footnote_ref": self._handle_footnote_ref_token,
        }

        handler = handler_map.get(token_type)
        if handler:
            return handler(token)
        return None


def markdown_to_ast(markdown_content: Union[str, bytes, Path], options: MarkdownParserOptions | None = None) -> Document:
    r"""Convert Markdown to a document tree.

    Parameters
    ----------
    markdown_content : str, bytes or Path
        Markdown text to parse, or a path to a Markdown file
    options : MarkdownParserOptions or None, default = None
        Parser configuration

    Returns
    -------
    Document
        Document root

    Examples
    --------
    >>> from mdmermaid.parsers.markdown import markdown_to_ast
    >>> doc = markdown_to_ast("# Hello\n\nWorld")
    >>> len(doc.children)
    2

    """
    converter = MarkdownToAstConverter(options)
    return converter.parse(markdown_content)
