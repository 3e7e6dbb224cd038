#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the concurrent splicing tree transformer."""
import asyncio

import pytest

from mdmermaid.ast import (
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    List,
    ListItem,
    Node,
    Paragraph,
    Strong,
    Text,
    ThematicBreak,
)
from mdmermaid.ast.transforms import AsyncNodeTransformer, extract_nodes, iter_nodes
from mdmermaid.exceptions import TransformError


class DuplicateCode(AsyncNodeTransformer):
    """Replace every code block with itself followed by a thematic break."""

    async def transform_node(self, node: Node) -> list[Node]:
        if isinstance(node, CodeBlock):
            return [node, ThematicBreak()]
        return [node]


class DropBreaks(AsyncNodeTransformer):
    """Remove every thematic break."""

    async def transform_node(self, node: Node) -> list[Node]:
        return [] if isinstance(node, ThematicBreak) else [node]


class SlowCode(AsyncNodeTransformer):
    """Sleep per code block, recording start and finish order."""

    def __init__(self, delays: dict[str, float]):
        self.delays = delays
        self.started: list[str] = []
        self.finished: list[str] = []
        self.active = 0
        self.max_active = 0

    async def transform_node(self, node: Node) -> list[Node]:
        if isinstance(node, CodeBlock):
            self.started.append(node.content)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            await asyncio.sleep(self.delays.get(node.content, 0))
            self.active -= 1
            self.finished.append(node.content)
            return [Paragraph(content=[Text(content=node.content.upper())])]
        return [node]


class FailOn(AsyncNodeTransformer):
    """Raise for one code block and count cancelled siblings."""

    def __init__(self, failing: str):
        self.failing = failing
        self.cancelled = 0

    async def transform_node(self, node: Node) -> list[Node]:
        if isinstance(node, CodeBlock):
            if node.content == self.failing:
                await asyncio.sleep(0.01)
                raise RuntimeError("boom")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        return [node]


class SplitRoot(AsyncNodeTransformer):
    """Turn the root into two nodes."""

    async def transform_node(self, node: Node) -> list[Node]:
        if isinstance(node, Document):
            return [node, node]
        return [node]


class BreakInsideList(AsyncNodeTransformer):
    """Replace list items with thematic breaks."""

    async def transform_node(self, node: Node) -> list[Node]:
        if isinstance(node, ListItem):
            return [ThematicBreak()]
        return [node]


@pytest.mark.unit
class TestAsyncNodeTransformer:
    """Test AsyncNodeTransformer."""

    def test_identity(self) -> None:
        """Test that the base class returns an equal, new tree."""
        doc = Document(children=[Heading(level=1, content=[Text(content="Title")]), ThematicBreak()])

        result = asyncio.run(AsyncNodeTransformer().transform_document(doc))

        assert result == doc
        assert result is not doc

    def test_splice_shifts_positions(self) -> None:
        """Test that one node becoming two shifts later siblings by one."""
        doc = Document(
            children=[
                Paragraph(content=[Text(content="before")]),
                CodeBlock(content="a"),
                Paragraph(content=[Text(content="after")]),
            ]
        )

        result = asyncio.run(DuplicateCode().transform_document(doc))

        assert len(result.children) == 4
        assert isinstance(result.children[0], Paragraph)
        assert isinstance(result.children[1], CodeBlock)
        assert isinstance(result.children[2], ThematicBreak)
        assert result.children[3] == doc.children[2]

    def test_removal(self) -> None:
        """Test that an empty replacement removes the node."""
        doc = Document(children=[ThematicBreak(), Paragraph(content=[Text(content="x")]), ThematicBreak()])

        result = asyncio.run(DropBreaks().transform_document(doc))

        assert result.children == [Paragraph(content=[Text(content="x")])]

    def test_nested_containers(self) -> None:
        """Test that replacements inside nested containers are spliced at their level."""
        doc = Document(
            children=[
                BlockQuote(children=[CodeBlock(content="a")]),
                List(ordered=False, items=[ListItem(children=[CodeBlock(content="b")])]),
            ]
        )

        result = asyncio.run(DuplicateCode().transform_document(doc))

        quote = result.children[0]
        assert isinstance(quote, BlockQuote)
        assert [type(c) for c in quote.children] == [CodeBlock, ThematicBreak]
        item = result.children[1].items[0]
        assert [type(c) for c in item.children] == [CodeBlock, ThematicBreak]

    def test_original_not_mutated(self) -> None:
        """Test that the input tree is left untouched."""
        doc = Document(children=[BlockQuote(children=[CodeBlock(content="a")])])

        asyncio.run(DuplicateCode().transform_document(doc))

        assert len(doc.children[0].children) == 1

    def test_children_run_concurrently_and_keep_order(self) -> None:
        """Test that siblings overlap in time and results stay positional."""
        transformer = SlowCode({"a": 0.05, "b": 0.01, "c": 0.03})
        doc = Document(children=[CodeBlock(content="a"), CodeBlock(content="b"), CodeBlock(content="c")])

        result = asyncio.run(transformer.transform_document(doc))

        assert transformer.max_active == 3
        assert transformer.finished == ["b", "c", "a"]
        assert [p.content[0].content for p in result.children] == ["A", "B", "C"]

    def test_failure_cancels_siblings(self) -> None:
        """Test that an exception propagates and cancels pending siblings."""
        transformer = FailOn("bad")
        doc = Document(children=[CodeBlock(content="slow1"), CodeBlock(content="bad"), CodeBlock(content="slow2")])

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(transformer.transform_document(doc))

        assert transformer.cancelled == 2

    def test_root_must_stay_single_document(self) -> None:
        """Test that a root yielding two nodes raises TransformError."""
        with pytest.raises(TransformError) as exc_info:
            asyncio.run(SplitRoot().transform_document(Document()))

        assert exc_info.value.transform_name == "transform"

    def test_root_must_be_document(self) -> None:
        """Test that a non-Document root is rejected."""
        with pytest.raises(TransformError):
            asyncio.run(AsyncNodeTransformer().transform_document(Paragraph()))  # type: ignore[arg-type]

    def test_positional_type_violation(self) -> None:
        """Test that a non-ListItem spliced into a List raises ValueError."""
        doc = Document(children=[List(ordered=False, items=[ListItem(children=[Paragraph()])])])

        with pytest.raises(ValueError, match="ListItem"):
            asyncio.run(BreakInsideList().transform_document(doc))


@pytest.mark.unit
class TestTraversal:
    """Test iter_nodes and extract_nodes."""

    def test_document_order(self) -> None:
        """Test that nodes are yielded parents first, in order."""
        doc = Document(
            children=[
                Heading(level=1, content=[Text(content="H")]),
                Paragraph(content=[Text(content="a"), Strong(content=[Text(content="b")])]),
            ]
        )

        texts = [n.content for n in iter_nodes(doc) if isinstance(n, Text)]

        assert texts == ["H", "a", "b"]
        assert next(iter_nodes(doc)) is doc

    def test_extract_by_type(self) -> None:
        """Test extracting code blocks from nested containers."""
        doc = Document(
            children=[
                CodeBlock(content="1"),
                BlockQuote(children=[CodeBlock(content="2")]),
                List(ordered=True, items=[ListItem(children=[CodeBlock(content="3")])]),
            ]
        )

        blocks = extract_nodes(doc, CodeBlock)

        assert [b.content for b in blocks] == ["1", "2", "3"]

    def test_extract_all(self) -> None:
        """Test that no type returns every node."""
        doc = Document(children=[Paragraph(content=[Text(content="x")])])

        assert len(extract_nodes(doc)) == 3
