#  Copyright (c) 2025 Tom Villani, Ph.D.
"""End-to-end tests: Markdown in, Markdown and image files out."""
from pathlib import Path

import pytest
from utils import EXPECTED_OUTPUT, SAMPLE_DOCUMENT, FakeEngine, svg_for

from mdmermaid import process, process_file
from mdmermaid.diagrams.invoker import hashed_file_name
from mdmermaid.exceptions import OutputWriteError
from mdmermaid.options import MermaidOptions

NESTED_DOCUMENT = """---
title: Architecture
tags:
- diagrams
---

# Overview

> Flow of a request:
>
> ```mermaid file=request.svg name=Request
> graph LR; client-->server
> ```

1. First step

   ```mermaid file=steps.svg name=Steps
   graph TD; a-->b
   ```

2. Second step

```mermaid
graph TD; left-->alone
```
"""


@pytest.mark.integration
class TestEndToEnd:
    """Test the whole pipeline with a recording engine."""

    def test_sample_document(self, temp_dir: Path) -> None:
        """Test the canonical example."""
        engine = FakeEngine()

        result = process(SAMPLE_DOCUMENT, path=temp_dir / "doc.md", cwd=temp_dir, options=MermaidOptions(engine=engine))

        assert result.contents == EXPECTED_OUTPUT
        assert (temp_dir / "example.svg").read_bytes() == svg_for("graph TD;\n    A-->B;")
        assert result.warnings == []
        assert engine.closed is False

    def test_missing_name_unchanged(self, temp_dir: Path) -> None:
        """Test that an incomplete block passes through untouched."""
        text = "Intro\n\n```mermaid file=example.svg\ngraph TD; A-->B\n```\n"
        engine = FakeEngine()

        result = process(text, path=temp_dir / "doc.md", cwd=temp_dir, options=MermaidOptions(engine=engine))

        assert result.contents == text
        assert engine.calls == []
        assert not (temp_dir / "example.svg").exists()

    def test_nested_document(self, temp_dir: Path) -> None:
        """Test containers, frontmatter and an unmarked block together."""
        engine = FakeEngine()

        result = process(NESTED_DOCUMENT, path=temp_dir / "doc.md", cwd=temp_dir, options=MermaidOptions(engine=engine))

        contents = result.contents or ""
        assert contents.startswith("---\ntitle: Architecture\ntags:\n- diagrams\n---\n\n# Overview\n")
        assert "> ![Request]\n>\n> [Request]: request.svg\n" in contents
        assert "   ![Steps]\n\n   [Steps]: steps.svg\n" in contents
        assert "```mermaid\ngraph TD; left-->alone\n```\n" in contents
        assert sorted(engine.calls) == ["graph LR; client-->server", "graph TD; a-->b"]
        assert (temp_dir / "request.svg").is_file()
        assert (temp_dir / "steps.svg").is_file()

    def test_document_in_subdirectory(self, temp_dir: Path) -> None:
        """Test that images land next to the document, not in cwd."""
        (temp_dir / "docs").mkdir()

        result = process(
            SAMPLE_DOCUMENT, path="docs/guide.md", cwd=temp_dir, options=MermaidOptions(engine=FakeEngine())
        )

        assert result.contents == EXPECTED_OUTPUT
        assert (temp_dir / "docs" / "example.svg").is_file()

    def test_failure_keeps_block(self, temp_dir: Path) -> None:
        """Test that a failed render leaves the block and reports a warning."""
        text = "```mermaid file=bad.svg name=Bad\nbroken\n```\n"

        result = process(
            text, path=temp_dir / "doc.md", cwd=temp_dir, options=MermaidOptions(engine=FakeEngine(failures={"broken"}))
        )

        assert result.contents == text
        assert len(result.warnings) == 1
        assert result.warnings[0].line == 1

    @pytest.mark.parametrize(
        "style,expected",
        [
            ("shortcut", '![Flow]\n\n[Flow]: f.svg "Request-flow"\n'),
            ("full", '![Request-flow][Flow]\n\n[Flow]: f.svg "Request-flow"\n'),
        ],
    )
    def test_alt_per_reference_style(self, temp_dir: Path, style: str, expected: str) -> None:
        """Test where a block's alt ends up for each reference style."""
        text = "```mermaid file=f.svg name=Flow alt=Request-flow\ngraph LR; A-->B\n```\n"

        result = process(
            text,
            path=temp_dir / "doc.md",
            cwd=temp_dir,
            options=MermaidOptions(engine=FakeEngine(), reference_style=style),
        )

        assert result.contents == expected

    def test_linked_source_keeps_link(self, temp_dir: Path) -> None:
        """Test that a marked link is rewritten to the rendered file and stays a link."""
        (temp_dir / "flow.mmd").write_text("graph LR; A-->B\n", encoding="utf-8")
        text = 'See [the flow](flow.mmd "mermaid:") here.\n'

        result = process(
            text,
            path=temp_dir / "doc.md",
            cwd=temp_dir,
            options=MermaidOptions(engine=FakeEngine(), render_links=True),
        )

        expected_name = hashed_file_name("graph LR; A-->B\n")
        assert result.contents == f'See [the flow]({expected_name} "mermaid:") here.\n'
        assert (temp_dir / expected_name).is_file()


@pytest.mark.integration
class TestProcessFile:
    """Test file-level processing."""

    def test_in_place(self, temp_dir: Path) -> None:
        """Test that the input is rewritten when no output is given."""
        doc = temp_dir / "doc.md"
        doc.write_text(SAMPLE_DOCUMENT, encoding="utf-8")

        process_file(doc, cwd=temp_dir, options=MermaidOptions(engine=FakeEngine()))

        assert doc.read_text(encoding="utf-8") == EXPECTED_OUTPUT
        assert (temp_dir / "example.svg").is_file()

    def test_separate_output(self, temp_dir: Path) -> None:
        """Test writing to another file."""
        doc = temp_dir / "doc.md"
        doc.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
        out = temp_dir / "out.md"

        result = process_file(doc, out, cwd=temp_dir, options=MermaidOptions(engine=FakeEngine()))

        assert out.read_text(encoding="utf-8") == EXPECTED_OUTPUT
        assert doc.read_text(encoding="utf-8") == SAMPLE_DOCUMENT
        assert result.path == doc

    def test_toml_frontmatter_preserved(self, temp_dir: Path) -> None:
        """Test that TOML frontmatter is written back as TOML."""
        doc = temp_dir / "doc.md"
        doc.write_text('+++\ntitle = "Notes"\n+++\n\n' + SAMPLE_DOCUMENT, encoding="utf-8")

        process_file(doc, cwd=temp_dir, options=MermaidOptions(engine=FakeEngine()))

        assert doc.read_text(encoding="utf-8") == '+++\ntitle = "Notes"\n+++\n\n' + EXPECTED_OUTPUT

    def test_unwritable_output(self, temp_dir: Path) -> None:
        """Test that a failed document write raises OutputWriteError."""
        doc = temp_dir / "doc.md"
        doc.write_text("# Notes\n", encoding="utf-8")
        out = temp_dir / "missing" / "out.md"

        with pytest.raises(OutputWriteError) as exc_info:
            process_file(doc, out, cwd=temp_dir, options=MermaidOptions(engine=FakeEngine()))

        assert exc_info.value.file_path == str(out)
        assert isinstance(exc_info.value.original_error, OSError)
