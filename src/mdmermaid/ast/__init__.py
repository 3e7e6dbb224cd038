#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/ast/__init__.py
"""Document tree used while diagrams are located, rendered and spliced.

- nodes: node classes and child access helpers
- visitors: visitor base class used by the Markdown serializer
- transforms: the asynchronous splicing transformer and traversal helpers

Examples
--------
    >>> from mdmermaid.ast import CodeBlock, Document, Paragraph, Text
    >>> doc = Document(children=[
    ...     Paragraph(content=[Text(content="Hello world")]),
    ...     CodeBlock(content="graph TD; A-->B\n", language="mermaid", meta="file=a.svg name=A"),
    ... ])

"""

from mdmermaid.ast.nodes import (
    Alignment,
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
    SourceLocation,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    get_node_children,
    replace_node_children,
)
from mdmermaid.ast.transforms import AsyncNodeTransformer, extract_nodes, iter_nodes
from mdmermaid.ast.visitors import NodeVisitor

__all__ = [
    # Nodes
    "Node",
    "SourceLocation",
    "Alignment",
    "Document",
    "Heading",
    "Paragraph",
    "CodeBlock",
    "BlockQuote",
    "List",
    "ListItem",
    "Table",
    "TableRow",
    "TableCell",
    "ThematicBreak",
    "HTMLBlock",
    "FootnoteDefinition",
    "Definition",
    "Text",
    "Emphasis",
    "Strong",
    "Strikethrough",
    "Code",
    "Link",
    "Image",
    "ImageReference",
    "LineBreak",
    "HTMLInline",
    "FootnoteReference",
    # Helpers
    "get_node_children",
    "replace_node_children",
    # Visitors and transforms
    "NodeVisitor",
    "AsyncNodeTransformer",
    "iter_nodes",
    "extract_nodes",
]
