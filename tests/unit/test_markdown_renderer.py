#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for Markdown serialization of document trees."""
import io
from pathlib import Path

import pytest
from utils import EXPECTED_OUTPUT, SAMPLE_DOCUMENT

from mdmermaid.ast import (
    BlockQuote,
    Code,
    CodeBlock,
    Definition,
    Document,
    Emphasis,
    Heading,
    Image,
    ImageReference,
    LineBreak,
    Link,
    List,
    ListItem,
    Paragraph,
    Strong,
    Text,
    ThematicBreak,
)
from mdmermaid.options import MarkdownRendererOptions
from mdmermaid.parsers import markdown_to_ast
from mdmermaid.renderers import MarkdownRenderer, ast_to_markdown


def para(text: str) -> Paragraph:
    return Paragraph(content=[Text(content=text)])


@pytest.mark.unit
class TestImageReferences:
    """Test the nodes produced by the diagram pass."""

    def test_expected_output(self) -> None:
        """Test the canonical replacement layout."""
        doc = Document(
            children=[
                para("Hello world!"),
                ImageReference(identifier="example_diagram", label="Example_Diagram"),
                Definition(identifier="example_diagram", label="Example_Diagram", url="example.svg"),
                para("World, hello!"),
            ]
        )

        assert ast_to_markdown(doc) == EXPECTED_OUTPUT

    @pytest.mark.parametrize(
        "reference_type,expected",
        [
            ("shortcut", "![Flow]\n"),
            ("collapsed", "![Flow][]\n"),
            ("full", "![Request flow][Flow]\n"),
        ],
    )
    def test_reference_styles(self, reference_type: str, expected: str) -> None:
        """Test the three reference syntaxes."""
        ref = ImageReference(identifier="flow", label="Flow", reference_type=reference_type, alt="Request flow")

        assert ast_to_markdown(Document(children=[ref])) == expected

    def test_full_without_alt_uses_label(self) -> None:
        """Test that a full reference without alt repeats the label."""
        ref = ImageReference(identifier="flow", label="Flow", reference_type="full")

        assert ast_to_markdown(Document(children=[ref])) == "![Flow][Flow]\n"

    def test_label_brackets_escaped(self) -> None:
        """Test that brackets in labels are escaped."""
        ref = ImageReference(identifier="a[1]", label="a[1]")

        assert ast_to_markdown(Document(children=[ref])) == "![a\\[1\\]]\n"

    def test_definition_with_title(self) -> None:
        """Test a definition with a quoted title."""
        definition = Definition(identifier="a", label="A", url="img/a.svg", title='Say "hi"')

        assert ast_to_markdown(Document(children=[definition])) == '[A]: img/a.svg "Say \\"hi\\""\n'

    def test_definition_url_with_spaces(self) -> None:
        """Test that URLs with whitespace are wrapped in angle brackets."""
        definition = Definition(identifier="a", label="A", url="my diagrams/a.svg")

        assert ast_to_markdown(Document(children=[definition])) == "[A]: <my diagrams/a.svg>\n"

    def test_in_block_quote(self) -> None:
        """Test replacement nodes inside a block quote."""
        doc = Document(
            children=[
                BlockQuote(
                    children=[
                        ImageReference(identifier="a", label="A"),
                        Definition(identifier="a", label="A", url="a.svg"),
                    ]
                )
            ]
        )

        assert ast_to_markdown(doc) == "> ![A]\n>\n> [A]: a.svg\n"

    def test_in_list_item(self) -> None:
        """Test that replacement nodes in a list item are indented under the marker."""
        item = ListItem(
            children=[
                para("Step"),
                ImageReference(identifier="a", label="A"),
                Definition(identifier="a", label="A", url="a.svg"),
            ]
        )
        doc = Document(children=[List(ordered=False, items=[item], tight=False, metadata={"bullet": "-"})])

        assert ast_to_markdown(doc) == "- Step\n\n  ![A]\n\n  [A]: a.svg\n"


@pytest.mark.unit
class TestCodeBlocks:
    """Test fenced code block output."""

    def test_info_string(self) -> None:
        """Test that language and meta form the info string."""
        block = CodeBlock(content="graph TD; A\n", language="mermaid", meta="file=a.svg name=A")

        assert ast_to_markdown(Document(children=[block])) == "```mermaid file=a.svg name=A\ngraph TD; A\n```\n"

    def test_missing_trailing_newline(self) -> None:
        """Test that content without a final newline still closes correctly."""
        block = CodeBlock(content="x", language="text")

        assert ast_to_markdown(Document(children=[block])) == "```text\nx\n```\n"

    def test_fence_lengthened(self) -> None:
        """Test that the fence grows past runs of backticks in the content."""
        block = CodeBlock(content="```\ninner\n```\n", language="markdown")

        assert ast_to_markdown(Document(children=[block])) == "````markdown\n```\ninner\n```\n````\n"

    def test_tilde_fence_option(self) -> None:
        """Test the fence character option."""
        block = CodeBlock(content="x\n")
        options = MarkdownRendererOptions(code_fence_char="~")

        assert ast_to_markdown(Document(children=[block]), options) == "~~~\nx\n~~~\n"


@pytest.mark.unit
class TestBlocksAndInlines:
    """Test general Markdown output."""

    def test_heading_and_break(self) -> None:
        """Test headings and thematic breaks."""
        doc = Document(children=[Heading(level=2, content=[Text(content="Title")]), ThematicBreak()])

        assert ast_to_markdown(doc) == "## Title\n\n---\n"

    def test_inline_formatting(self) -> None:
        """Test emphasis, strong, code and links."""
        doc = Document(
            children=[
                Paragraph(
                    content=[
                        Emphasis(content=[Text(content="a")]),
                        Text(content=" "),
                        Strong(content=[Text(content="b")]),
                        Text(content=" "),
                        Code(content="c"),
                        Text(content=" "),
                        Link(url="https://example.com", content=[Text(content="d")]),
                        Text(content=" "),
                        Image(url="e.svg", alt_text="e"),
                    ]
                )
            ]
        )

        assert ast_to_markdown(doc) == "*a* **b** `c` [d](https://example.com) ![e](e.svg)\n"

    def test_escaping(self) -> None:
        """Test that special characters in text are escaped."""
        assert ast_to_markdown(Document(children=[para("*not* [a] link")])) == "\\*not\\* \\[a\\] link\n"

    def test_escaping_disabled(self) -> None:
        """Test that escaping can be turned off."""
        options = MarkdownRendererOptions(escape_special=False)

        assert ast_to_markdown(Document(children=[para("*raw*")]), options) == "*raw*\n"

    def test_line_breaks(self) -> None:
        """Test soft and hard line breaks."""
        paragraph = Paragraph(
            content=[Text(content="a"), LineBreak(soft=True), Text(content="b"), LineBreak(), Text(content="c")]
        )

        assert ast_to_markdown(Document(children=[paragraph])) == "a\nb\\\nc\n"

    def test_tight_list(self) -> None:
        """Test a tight bullet list keeps its bullet."""
        doc = Document(
            children=[
                List(
                    ordered=False,
                    items=[ListItem(children=[para("a")]), ListItem(children=[para("b")])],
                    metadata={"bullet": "-"},
                )
            ]
        )

        assert ast_to_markdown(doc) == "- a\n- b\n"

    def test_ordered_list(self) -> None:
        """Test the start number of an ordered list."""
        doc = Document(
            children=[List(ordered=True, start=3, items=[ListItem(children=[para("a")]), ListItem(children=[para("b")])])]
        )

        assert ast_to_markdown(doc) == "3. a\n4. b\n"

    def test_task_items(self) -> None:
        """Test task checkboxes."""
        doc = Document(
            children=[
                List(
                    ordered=False,
                    items=[ListItem(children=[para("done")], task_status="checked")],
                    metadata={"bullet": "-"},
                )
            ]
        )

        assert ast_to_markdown(doc) == "- [x] done\n"

    def test_frontmatter(self) -> None:
        """Test that metadata is written back as frontmatter."""
        doc = Document(children=[para("Body")], metadata={"title": "Diagrams"})

        assert ast_to_markdown(doc) == "---\ntitle: Diagrams\n---\n\nBody\n"

    def test_toml_frontmatter(self) -> None:
        """Test TOML frontmatter output."""
        doc = Document(children=[para("Body")], metadata={"title": "Diagrams"})
        options = MarkdownRendererOptions(metadata_format="toml")

        assert ast_to_markdown(doc, options) == '+++\ntitle = "Diagrams"\n+++\n\nBody\n'

    def test_empty_document(self) -> None:
        """Test that an empty document renders to an empty string."""
        assert ast_to_markdown(Document()) == ""


@pytest.mark.unit
class TestRoundTrip:
    """Test parse then render for documents without diagrams to replace."""

    def test_sample_document(self) -> None:
        """Test that the sample document survives unchanged."""
        assert ast_to_markdown(markdown_to_ast(SAMPLE_DOCUMENT)) == SAMPLE_DOCUMENT

    def test_nested_structures(self) -> None:
        """Test lists, quotes and code blocks together."""
        text = "# Guide\n\n- one\n- two\n\n> quoted\n\n```mermaid\ngraph TD; A\n```\n"

        assert ast_to_markdown(markdown_to_ast(text)) == text


@pytest.mark.unit
class TestOutputTargets:
    """Test writing rendered Markdown."""

    def test_render_to_path(self, temp_dir: Path) -> None:
        """Test writing to a file path."""
        path = temp_dir / "out.md"

        MarkdownRenderer().render(Document(children=[para("x")]), path)

        assert path.read_text(encoding="utf-8") == "x\n"

    def test_render_to_text_stream(self) -> None:
        """Test writing to a text stream."""
        stream = io.StringIO()

        MarkdownRenderer().render(Document(children=[para("x")]), stream)

        assert stream.getvalue() == "x\n"

    def test_render_to_binary_stream(self) -> None:
        """Test writing to a binary stream."""
        stream = io.BytesIO()

        MarkdownRenderer().render(Document(children=[para("x")]), stream)

        assert stream.getvalue() == b"x\n"
