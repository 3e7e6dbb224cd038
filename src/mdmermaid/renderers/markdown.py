#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/renderers/markdown.py
"""Markdown rendering from the document tree.

This module provides the MarkdownRenderer class which serializes a
:class:`~mdmermaid.ast.Document` back to Markdown text. The renderer
maintains context (indentation, list nesting) during traversal.

Reference-style images and their definitions, which the diagram pass
produces, are written as::

    ![Example_Diagram]

    [Example_Diagram]: example.svg

"""

from __future__ import annotations

import re
from pathlib import Path
from typing import IO, Union

from mdmermaid.ast.nodes import (
    BlockQuote,
    Code,
    CodeBlock,
    Definition,
    Document,
    Emphasis,
    FootnoteDefinition,
    FootnoteReference,
    Heading,
    HTMLBlock,
    HTMLInline,
    Image,
    ImageReference,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from mdmermaid.ast.visitors import NodeVisitor
from mdmermaid.options.base import validate_options_type
from mdmermaid.options.markdown import MarkdownRendererOptions
from mdmermaid.renderers.base import BaseRenderer, InlineContentMixin
from mdmermaid.utils.frontmatter import format_frontmatter


def _escape_brackets(text: str) -> str:
    return text.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")


def _format_destination(url: str) -> str:
    if not url or re.search(r"\s", url):
        return f"<{url}>"
    return url


def _format_title(title: str | None) -> str:
    if not title:
        return ""
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f' "{escaped}"'


class MarkdownRenderer(NodeVisitor, InlineContentMixin, BaseRenderer):
    """Render document trees to Markdown text.

    Parameters
    ----------
    options : MarkdownRendererOptions or None, default = None
        Markdown formatting options

    Examples
    --------
        >>> from mdmermaid.ast import Definition, Document, ImageReference
        >>> doc = Document(children=[
        ...     ImageReference(identifier="example", label="Example"),
        ...     Definition(identifier="example", label="Example", url="example.svg"),
        ... ])
        >>> print(MarkdownRenderer().render_to_string(doc), end="")
        ![Example]
        <BLANKLINE>
        [Example]: example.svg

    """

    def __init__(self, options: MarkdownRendererOptions | None = None):
        """Initialize the Markdown renderer with options."""
        validate_options_type(options, MarkdownRendererOptions, "markdown renderer")
        options = options or MarkdownRendererOptions()
        BaseRenderer.__init__(self, options)
        self.options: MarkdownRendererOptions = options
        self._output: list[str] = []
        self._indent_level: int = 0
        self._in_list: bool = False
        self._list_marker_stack: list[str] = []
        self._tight_stack: list[bool] = []
        self._marker_width_stack: list[int] = []
        self._inline_depth: int = 0

    def render_to_string(self, document: Document) -> str:
        """Render a document to a Markdown string.

        Parameters
        ----------
        document : Document
            The document node to render

        Returns
        -------
        str
            Markdown text ending in a single newline, or an empty string for
            an empty document

        """
        self._output = []
        self._indent_level = 0
        self._in_list = False
        self._list_marker_stack = []
        self._tight_stack = []
        self._marker_width_stack = []
        self._inline_depth = 0

        document.accept(self)

        result = "".join(self._output)
        self._output = []

        return self._cleanup_output(result)

    def render(self, doc: Document, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render a document and write the Markdown to ``output``."""
        self.write_text_output(self.render_to_string(doc), output)

    def _render_inline_content(self, content: list[Node]) -> str:
        self._inline_depth += 1
        try:
            return super()._render_inline_content(content)
        finally:
            self._inline_depth -= 1

    def _cleanup_output(self, text: str) -> str:
        """Normalize line endings and trailing whitespace."""
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = text.rstrip()
        return text + "\n" if text else ""

    def _escape_markdown(self, text: str) -> str:
        """Escape special markdown characters with context awareness.

        Backslash, backticks, asterisks, braces and brackets are always
        escaped. ``#`` is escaped only at the start of the text, where it
        could begin a heading, and ``_`` only at word boundaries, so
        ``snake_case`` stays readable.

        Parameters
        ----------
        text : str
            Text to escape

        Returns
        -------
        str
            Escaped text

        """
        if not self.options.escape_special:
            return text

        always_escape = r"\`*{}[]"

        escaped_chars = []
        for i, char in enumerate(text):
            if char in always_escape:
                escaped_chars.append("\\")
                escaped_chars.append(char)
            elif char == "#":
                if i == 0:
                    escaped_chars.append("\\")
                escaped_chars.append(char)
            elif char == "_":
                prev_alnum = i > 0 and text[i - 1].isalnum()
                next_alnum = i < len(text) - 1 and text[i + 1].isalnum()
                if not (prev_alnum and next_alnum):
                    escaped_chars.append("\\")
                escaped_chars.append(char)
            else:
                escaped_chars.append(char)

        return "".join(escaped_chars)

    def _current_indent(self) -> str:
        # For lists, accumulated marker widths keep nested content aligned
        if self._marker_width_stack:
            return " " * sum(self._marker_width_stack)
        return " " * (self._indent_level * self.options.list_indent_width)

    def _indent_block(self, text: str) -> str:
        """Prefix every non-empty line of ``text`` with the current indent."""
        indent = self._current_indent()
        if not indent:
            return text
        return "\n".join(indent + line if line else line for line in text.split("\n"))

    def _get_bullet_symbol(self, depth: int) -> str:
        symbols = self.options.bullet_symbols
        return symbols[depth % len(symbols)]

    def visit_document(self, node: Document) -> None:
        """Render a Document node; blocks are separated by one blank line."""
        if self.options.include_frontmatter and node.metadata:
            self._output.append(format_frontmatter(node.metadata, self.options.metadata_format) + "\n")

        rendered: list[str] = []
        for child in node.children:
            saved_output = self._output
            self._output = []
            child.accept(self)
            block = "".join(self._output)
            self._output = saved_output
            if block:
                rendered.append(block)

        self._output.append("\n\n".join(rendered))

    def visit_heading(self, node: Heading) -> None:
        """Render a Heading node in ATX style."""
        content = self._render_inline_content(node.content)
        self._output.append(f"{'#' * node.level} {content}")

    def visit_paragraph(self, node: Paragraph) -> None:
        """Render a Paragraph node."""
        content = self._render_inline_content(node.content)
        indent = self._current_indent()
        if indent:
            content = content.replace("\n", "\n" + indent)
        self._output.append(f"{indent}{content}")

    def visit_code_block(self, node: CodeBlock) -> None:
        """Render a CodeBlock node as a fenced block.

        The fence is made longer than any run of the fence character inside
        the content, so the block always closes where it should. The info
        string is the language followed by ``meta``.

        Parameters
        ----------
        node : CodeBlock
            Code block to render

        """
        fence_char = self.options.code_fence_char

        fence_length = self.options.code_fence_min
        if fence_char in node.content:
            max_consecutive = max(len(run) for run in re.findall(re.escape(fence_char) + "+", node.content))
            fence_length = max(fence_length, max_consecutive + 1)

        fence = fence_char * fence_length
        info = " ".join(part for part in (node.language or "", node.meta) if part)

        content = node.content
        if content and not content.endswith("\n"):
            content += "\n"

        self._output.append(self._indent_block(f"{fence}{info}\n{content}{fence}"))

    def visit_block_quote(self, node: BlockQuote) -> None:
        """Render a BlockQuote node."""
        saved_output = self._output
        self._output = []

        for i, child in enumerate(node.children):
            if i > 0:
                self._output.append("\n\n")
            child.accept(self)

        lines = "".join(self._output).split("\n")
        self._output = saved_output
        self._output.append("\n".join(f"> {line}" if line else ">" for line in lines))

    def visit_list(self, node: List) -> None:
        """Render a List node."""
        was_in_list = self._in_list

        if self._in_list:
            self._indent_level += 1

        self._in_list = True

        self._tight_stack.append(node.tight)
        bullet = node.metadata.get("bullet") if node.metadata else None
        for i, item in enumerate(node.items):
            if node.ordered:
                delimiter = bullet if bullet in (".", ")") else "."
                marker = f"{node.start + i}{delimiter} "
            else:
                symbol = bullet if bullet in ("*", "-", "+") else self._get_bullet_symbol(len(self._list_marker_stack))
                marker = f"{symbol} "

            self._list_marker_stack.append(marker)
            item.accept(self)
            self._list_marker_stack.pop()

            if i < len(node.items) - 1:
                self._output.append("\n" if node.tight else "\n\n")

        self._tight_stack.pop()
        self._in_list = was_in_list

        if was_in_list:
            self._indent_level -= 1

    def visit_list_item(self, node: ListItem) -> None:
        """Render a ListItem node.

        The first child follows the marker on the same line; later children
        are indented to the marker width.

        Parameters
        ----------
        node : ListItem
            List item to render

        """
        indent = self._current_indent()
        marker = self._list_marker_stack[-1] if self._list_marker_stack else "* "

        if node.task_status:
            checkbox = "[x]" if node.task_status == "checked" else "[ ]"
            marker = f"{marker}{checkbox} "

        self._output.append(f"{indent}{marker}")

        marker_width = len(marker)
        tight = self._tight_stack[-1] if self._tight_stack else True
        separator = "\n" if tight else "\n\n"

        for i, child in enumerate(node.children):
            if i == 0:
                # First child renders without indentation, right after the marker
                saved_output = self._output
                self._output = []
                saved_stack = self._marker_width_stack.copy()
                saved_indent_level = self._indent_level
                self._marker_width_stack = [len(indent) + marker_width]
                self._indent_level = 0

                child.accept(self)

                self._marker_width_stack = saved_stack
                self._indent_level = saved_indent_level

                child_content = "".join(self._output)
                self._output = saved_output
                # The first line sits after the marker, so drop its indent
                self._output.append(child_content.lstrip(" "))
            else:
                if i == 1:
                    # Continuation blocks align with the text after the marker
                    self._marker_width_stack.append(len(indent) + marker_width - sum(self._marker_width_stack))
                self._output.append("\n" if isinstance(child, List) else separator)
                child.accept(self)

        if len(node.children) > 1:
            self._marker_width_stack.pop()

    def visit_table(self, node: Table) -> None:
        """Render a Table node as a pipe table."""
        rows_to_render = [node.header] if node.header else []
        rows_to_render.extend(node.rows)

        if not rows_to_render:
            return

        num_cols = max(len(row.cells) for row in rows_to_render)
        rendered_rows = [
            [self._render_inline_content(cell.content).replace("|", "\\|") for cell in row.cells]
            for row in rows_to_render
        ]

        lines = []
        for i, row_cells in enumerate(rendered_rows):
            row_cells = row_cells + [""] * (num_cols - len(row_cells))
            lines.append("| " + " | ".join(row_cells) + " |")
            if i == 0 and node.header:
                lines.append(self._generate_alignment_row(node, num_cols))

        self._output.append(self._indent_block("\n".join(lines)))

    @staticmethod
    def _generate_alignment_row(node: Table, num_cols: int) -> str:
        separators = {"center": ":---:", "right": "---:", "left": ":---"}
        alignments = [separators.get(alignment or "", "---") for alignment in node.alignments[:num_cols]]
        alignments.extend(["---"] * (num_cols - len(alignments)))
        return "|" + "|".join(alignments) + "|"

    def visit_table_row(self, node: TableRow) -> None:
        """Rows are rendered by :meth:`visit_table`."""
        pass

    def visit_table_cell(self, node: TableCell) -> None:
        """Cells are rendered by :meth:`visit_table`."""
        pass

    def visit_thematic_break(self, node: ThematicBreak) -> None:
        """Render a ThematicBreak node."""
        self._output.append(f"{self._current_indent()}---")

    def visit_html_block(self, node: HTMLBlock) -> None:
        """Render an HTMLBlock node verbatim."""
        self._output.append(self._indent_block(node.content.rstrip("\n")))

    def visit_footnote_definition(self, node: FootnoteDefinition) -> None:
        """Render a FootnoteDefinition node; continuation blocks are indented four spaces."""
        self._output.append(f"[^{node.identifier}]: ")
        for i, child in enumerate(node.content):
            saved_output = self._output
            self._output = []
            child.accept(self)
            child_content = "".join(self._output)
            self._output = saved_output
            if i == 0:
                self._output.append(child_content)
            else:
                indent_lines = child_content.split("\n")
                self._output.append("\n\n    " + "\n    ".join(indent_lines))

    def visit_definition(self, node: Definition) -> None:
        """Render a Definition node as ``[label]: url "title"``."""
        label = _escape_brackets(node.label)
        destination = _format_destination(node.url)
        self._output.append(f"{self._current_indent()}[{label}]: {destination}{_format_title(node.title)}")

    def visit_text(self, node: Text) -> None:
        """Render a Text node."""
        self._output.append(self._escape_markdown(node.content))

    def visit_emphasis(self, node: Emphasis) -> None:
        """Render an Emphasis node."""
        content = self._render_inline_content(node.content)
        symbol = self.options.emphasis_symbol
        self._output.append(f"{symbol}{content}{symbol}")

    def visit_strong(self, node: Strong) -> None:
        """Render a Strong node."""
        content = self._render_inline_content(node.content)
        self._output.append(f"**{content}**")

    def visit_strikethrough(self, node: Strikethrough) -> None:
        """Render a Strikethrough node."""
        content = self._render_inline_content(node.content)
        self._output.append(f"~~{content}~~")

    def visit_code(self, node: Code) -> None:
        """Render a Code node with enough backticks to hold its content."""
        runs = re.findall(r"`+", node.content)
        backticks = "`" * (max((len(run) for run in runs), default=0) + 1)
        content = node.content
        if content.startswith("`") or content.endswith("`"):
            content = f" {content} "
        self._output.append(f"{backticks}{content}{backticks}")

    def visit_link(self, node: Link) -> None:
        """Render a Link node inline."""
        content = self._render_inline_content(node.content)
        self._output.append(f"[{content}]({_format_destination(node.url)}{_format_title(node.title)})")

    def visit_image(self, node: Image) -> None:
        """Render an Image node inline."""
        alt = _escape_brackets(node.alt_text)
        self._output.append(f"![{alt}]({_format_destination(node.url)}{_format_title(node.title)})")

    def visit_image_reference(self, node: ImageReference) -> None:
        """Render an ImageReference node.

        ``shortcut`` produces ``![label]``, ``collapsed`` produces
        ``![label][]`` and ``full`` produces ``![alt][label]``.

        Parameters
        ----------
        node : ImageReference
            Image reference to render

        """
        label = _escape_brackets(node.label)
        if node.reference_type == "full":
            reference = f"![{_escape_brackets(node.alt or node.label)}][{label}]"
        elif node.reference_type == "collapsed":
            reference = f"![{label}][]"
        else:
            reference = f"![{label}]"

        # A reference standing in for a block takes the block's indentation
        indent = self._current_indent() if self._inline_depth == 0 else ""
        self._output.append(f"{indent}{reference}")

    def visit_line_break(self, node: LineBreak) -> None:
        """Render a LineBreak node; hard breaks use a trailing backslash."""
        self._output.append("\n" if node.soft else "\\\n")

    def visit_html_inline(self, node: HTMLInline) -> None:
        """Render an HTMLInline node verbatim."""
        self._output.append(node.content)

    def visit_footnote_reference(self, node: FootnoteReference) -> None:
        """Render a FootnoteReference node."""
        self._output.append(f"[^{node.identifier}]")


def ast_to_markdown(document: Document, options: MarkdownRendererOptions | None = None) -> str:
    """Serialize a document tree to Markdown.

    Parameters
    ----------
    document : Document
        Document to render
    options : MarkdownRendererOptions or None, default = None
        Formatting options

    Returns
    -------
    str
        Markdown text

    """
    return MarkdownRenderer(options).render_to_string(document)
