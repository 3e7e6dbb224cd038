#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/ast/nodes.py
"""Document tree node classes.

This module defines the closed set of node variants used to represent a
Markdown document while diagrams are located, rendered and spliced back in.
Every node is a dataclass deriving from :class:`Node` and dispatches itself to
a visitor through ``accept``.

Node Hierarchy
--------------
Block-level nodes:
    - Document, Heading, Paragraph, CodeBlock, BlockQuote
    - List, ListItem, Table, TableRow, TableCell
    - ThematicBreak, HTMLBlock, FootnoteDefinition, Definition

Inline nodes:
    - Text, Emphasis, Strong, Strikethrough, Code
    - Link, Image, ImageReference, LineBreak
    - HTMLInline, FootnoteReference

Containers expose their ordered children through a field named for the
position they occupy (``children``, ``content``, ``items``, ``rows``/``header``
or ``cells``). Use :func:`get_node_children` and :func:`replace_node_children`
to work with them uniformly; the latter never mutates the original node.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional

from mdmermaid.constants import ReferenceStyle

Alignment = Literal["left", "center", "right"]


@dataclass
class SourceLocation:
    """Position of a node in the text it was parsed from.

    Parameters
    ----------
    format : str
        Source format (always ``"markdown"`` for parsed documents)
    line : int or None, default = None
        1-based line number of the node's first line
    column : int or None, default = None
        1-based column number
    metadata : dict, default = empty dict
        Additional location information

    """

    format: str
    line: Optional[int] = None
    column: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format as ``line:column`` (unknown parts become 1)."""
        return f"{self.line or 1}:{self.column or 1}"


class Node(ABC):
    """Base class for all document tree nodes.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary metadata associated with this node
    source_location : SourceLocation or None, default = None
        Where this node came from in the source text

    """

    metadata: dict[str, Any]
    source_location: Optional[SourceLocation]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Dispatch to the matching ``visit_*`` method of ``visitor``.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Root node of a parsed document.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Document-level metadata (frontmatter lands here)
    source_location : SourceLocation or None, default = None
        Source location information

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_document(self)``."""
        return visitor.visit_document(self)


@dataclass
class Heading(Node):
    """ATX heading (levels 1-6) with inline content.

    Parameters
    ----------
    level : int
        Heading level (1-6)
    content : list of Node, default = empty list
        Inline nodes representing the heading text

    """

    level: int
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate heading level is between 1 and 6."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_heading(self)``."""
        return visitor.visit_heading(self)


@dataclass
class Paragraph(Node):
    """Paragraph of inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_paragraph(self)``."""
        return visitor.visit_paragraph(self)


@dataclass
class CodeBlock(Node):
    """Fenced or indented code block.

    The fence info string is split in two: its first word becomes
    ``language`` and whatever follows becomes ``meta``. Diagram blocks carry
    their ``key=value`` annotations in ``meta``.

    Parameters
    ----------
    content : str
        Code content (not parsed as markdown)
    language : str or None, default = None
        First word of the info string
    meta : str, default = ''
        Remainder of the info string after the language
    fence_char : str, default = '`'
        Character used for fencing (` or ~)
    fence_length : int, default = 3
        Number of fence characters
    metadata : dict, default = empty dict
        Code block metadata
    source_location : SourceLocation or None, default = None
        Source location information

    """

    content: str
    language: Optional[str] = None
    meta: str = ""
    fence_char: str = "`"
    fence_length: int = 3
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_code_block(self)``."""
        return visitor.visit_code_block(self)


@dataclass
class BlockQuote(Node):
    """Block quote containing other block nodes."""

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_block_quote(self)``."""
        return visitor.visit_block_quote(self)


@dataclass
class List(Node):
    """Ordered or unordered list.

    Parameters
    ----------
    ordered : bool
        True for ordered lists, False for bulleted
    items : list of ListItem, default = empty list
        List items; nothing but ListItem is allowed here
    start : int, default = 1
        Starting number for ordered lists
    tight : bool, default = True
        Whether the list is tight (no blank lines between items)

    """

    ordered: bool
    items: list[ListItem] = field(default_factory=list)
    start: int = 1
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_list(self)``."""
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item holding block content.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the list item
    task_status : {'checked', 'unchecked'} or None, default = None
        For GFM task lists

    """

    children: list[Node] = field(default_factory=list)
    task_status: Optional[Literal["checked", "unchecked"]] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_list_item(self)``."""
        return visitor.visit_list_item(self)


@dataclass
class Table(Node):
    """GFM table.

    Parameters
    ----------
    rows : list of TableRow, default = empty list
        Body rows
    header : TableRow or None, default = None
        Header row
    alignments : list, default = empty list
        Column alignments ('left', 'center', 'right', or None)

    """

    rows: list[TableRow] = field(default_factory=list)
    header: Optional[TableRow] = None
    alignments: list[Alignment | None] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_table(self)``."""
        return visitor.visit_table(self)


@dataclass
class TableRow(Node):
    """Row of table cells; ``is_header`` marks the header row."""

    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_table_row(self)``."""
        return visitor.visit_table_row(self)


@dataclass
class TableCell(Node):
    """Table cell with inline content."""

    content: list[Node] = field(default_factory=list)
    alignment: Alignment | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_table_cell(self)``."""
        return visitor.visit_table_cell(self)


@dataclass
class ThematicBreak(Node):
    """Horizontal rule."""

    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_thematic_break(self)``."""
        return visitor.visit_thematic_break(self)


@dataclass
class HTMLBlock(Node):
    """Raw HTML block, kept verbatim.

    Also produced for diagrams in simple mode, where the diagram source is
    wrapped in ``<div class="mermaid">`` for client-side rendering.

    """

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_html_block(self)``."""
        return visitor.visit_html_block(self)


@dataclass
class FootnoteDefinition(Node):
    """Footnote definition (``[^id]: content``) holding block content."""

    identifier: str
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_footnote_definition(self)``."""
        return visitor.visit_footnote_definition(self)


@dataclass
class Definition(Node):
    """Link reference definition (``[label]: url "title"``).

    Resolves reference-style links and images that share its identifier.
    A definition and the references using it are siblings in the tree and
    are associated only through ``identifier``.

    Parameters
    ----------
    identifier : str
        Normalized (lowercase) identifier used for matching
    label : str
        Label as written in the source
    url : str
        Destination URL
    title : str or None, default = None
        Optional title
    metadata : dict, default = empty dict
        Definition metadata
    source_location : SourceLocation or None, default = None
        Source location information

    """

    identifier: str
    label: str
    url: str
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_definition(self)``."""
        return visitor.visit_definition(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Text(Node):
    """Plain text."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_text(self)``."""
        return visitor.visit_text(self)


@dataclass
class Emphasis(Node):
    """Emphasized (italic) inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_emphasis(self)``."""
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strong (bold) inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_strong(self)``."""
        return visitor.visit_strong(self)


@dataclass
class Strikethrough(Node):
    """Strikethrough inline content (GFM)."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_strikethrough(self)``."""
        return visitor.visit_strikethrough(self)


@dataclass
class Code(Node):
    """Inline code span."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_code(self)``."""
        return visitor.visit_code(self)


@dataclass
class Link(Node):
    """Inline link.

    Parameters
    ----------
    url : str
        Link destination URL
    content : list of Node, default = empty list
        Inline nodes representing link text
    title : str or None, default = None
        Optional link title; ``mermaid:`` marks a diagram source link

    """

    url: str
    content: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_link(self)``."""
        return visitor.visit_link(self)


@dataclass
class Image(Node):
    """Inline image.

    Parameters
    ----------
    url : str
        Image source URL
    alt_text : str, default = ''
        Alternative text description
    title : str or None, default = None
        Optional image title

    """

    url: str
    alt_text: str = ""
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_image(self)``."""
        return visitor.visit_image(self)


@dataclass
class ImageReference(Node):
    """Reference-style image (``![alt][label]``).

    The image's URL is provided by a sibling :class:`Definition` with the
    same identifier.

    Parameters
    ----------
    identifier : str
        Normalized (lowercase) identifier of the matching definition
    label : str
        Label as it should be written
    reference_type : {'full', 'collapsed', 'shortcut'}, default = 'shortcut'
        Syntax used when writing the reference: ``![alt][label]``,
        ``![label][]`` or ``![label]``
    alt : str, default = ''
        Alternative text

    """

    identifier: str
    label: str
    reference_type: ReferenceStyle = "shortcut"
    alt: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate the reference type."""
        if self.reference_type not in ("full", "collapsed", "shortcut"):
            raise ValueError(f"Invalid reference type: {self.reference_type!r}")

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_image_reference(self)``."""
        return visitor.visit_image_reference(self)


@dataclass
class LineBreak(Node):
    """Line break; ``soft`` is True for a newline in the source."""

    soft: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_line_break(self)``."""
        return visitor.visit_line_break(self)


@dataclass
class HTMLInline(Node):
    """Inline raw HTML, kept verbatim."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_html_inline(self)``."""
        return visitor.visit_html_inline(self)


@dataclass
class FootnoteReference(Node):
    """Inline footnote reference (``[^id]``)."""

    identifier: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Return ``visitor.visit_footnote_reference(self)``."""
        return visitor.visit_footnote_reference(self)


_BLOCK_CONTAINERS = (Document, BlockQuote, ListItem)
_CONTENT_CONTAINERS = (Heading, Paragraph, Emphasis, Strong, Strikethrough, Link, TableCell, FootnoteDefinition)


def get_node_children(node: Node) -> list[Node]:
    """Get the ordered child nodes of a node.

    Parameters
    ----------
    node : Node
        The node to get children from

    Returns
    -------
    list of Node
        New list of child nodes (empty for leaf nodes)

    Examples
    --------
    >>> para = Paragraph(content=[Text("Hello"), Strong(content=[Text("world")])])
    >>> len(get_node_children(para))
    2

    """
    if isinstance(node, _BLOCK_CONTAINERS):
        return list(node.children)

    if isinstance(node, _CONTENT_CONTAINERS):
        return list(node.content)

    if isinstance(node, List):
        return list(node.items)

    # Header first, then body rows
    if isinstance(node, Table):
        children: list[Node] = []
        if node.header:
            children.append(node.header)
        children.extend(node.rows)
        return children

    if isinstance(node, TableRow):
        return list(node.cells)

    return []


def _require_type(container: Node, children: list[Node], expected: type[Node]) -> None:
    for child in children:
        if not isinstance(child, expected):
            raise ValueError(
                f"{type(container).__name__} children must be {expected.__name__} instances, "
                f"got {type(child).__name__}"
            )


def replace_node_children(node: Node, new_children: list[Node]) -> Node:
    """Create a copy of a node with its children replaced.

    The original node is not modified. Containers whose children occupy a
    typed position (list items, table rows, row cells) reject children of the
    wrong type.

    Parameters
    ----------
    node : Node
        The node to copy
    new_children : list of Node
        Children for the copy, in order

    Returns
    -------
    Node
        New node with the given children (``node`` itself for leaf nodes)

    Raises
    ------
    ValueError
        If a child is not allowed in the container's child position

    Notes
    -----
    For Table nodes the first row with ``is_header=True`` becomes the header
    and every other row becomes a body row.

    Examples
    --------
    >>> heading = Heading(level=1, content=[Text("Hello")])
    >>> replace_node_children(heading, [Text("Goodbye")]).content[0].content
    'Goodbye'

    """
    if isinstance(node, _BLOCK_CONTAINERS):
        return replace(node, children=list(new_children))

    if isinstance(node, _CONTENT_CONTAINERS):
        return replace(node, content=list(new_children))

    if isinstance(node, List):
        _require_type(node, new_children, ListItem)
        return replace(node, items=list(new_children))  # type: ignore[arg-type]

    if isinstance(node, Table):
        _require_type(node, new_children, TableRow)
        header_row: TableRow | None = None
        body_rows: list[TableRow] = []
        for child in new_children:
            assert isinstance(child, TableRow)
            if child.is_header and header_row is None:
                header_row = child
            else:
                body_rows.append(child)
        return replace(node, header=header_row, rows=body_rows)

    if isinstance(node, TableRow):
        _require_type(node, new_children, TableCell)
        return replace(node, cells=list(new_children))  # type: ignore[arg-type]

    return node
