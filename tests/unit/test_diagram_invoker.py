#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for rendering diagrams to files."""
import asyncio
from pathlib import Path

import pytest
from utils import FakeEngine, svg_for

from mdmermaid.diagrams.invoker import hashed_file_name, render_to_file
from mdmermaid.exceptions import OutputWriteError, RenderError


@pytest.mark.unit
class TestRenderToFile:
    """Test render_to_file."""

    def test_writes_rendered_bytes(self, temp_dir: Path) -> None:
        """Test that the rendered bytes land at output_dir / file_name."""
        engine = FakeEngine()

        path = asyncio.run(render_to_file(engine, "graph TD; A-->B", temp_dir, "example.svg"))

        assert path == (temp_dir / "example.svg").resolve()
        assert path.read_bytes() == svg_for("graph TD; A-->B")
        assert engine.calls == ["graph TD; A-->B"]

    def test_idempotent(self, temp_dir: Path) -> None:
        """Test that rendering twice overwrites with identical content."""
        engine = FakeEngine()

        first = asyncio.run(render_to_file(engine, "graph LR; X-->Y", temp_dir, "x.svg"))
        content = first.read_bytes()
        second = asyncio.run(render_to_file(engine, "graph LR; X-->Y", temp_dir, "x.svg"))

        assert first == second
        assert second.read_bytes() == content

    def test_render_error_propagates(self, temp_dir: Path) -> None:
        """Test that engine failures surface as RenderError and write nothing."""
        engine = FakeEngine(failures={"bad"})

        with pytest.raises(RenderError):
            asyncio.run(render_to_file(engine, "bad", temp_dir, "bad.svg"))

        assert not (temp_dir / "bad.svg").exists()

    def test_missing_directory_is_write_error(self, temp_dir: Path) -> None:
        """Test that a missing parent directory raises OutputWriteError."""
        engine = FakeEngine()

        with pytest.raises(OutputWriteError) as exc_info:
            asyncio.run(render_to_file(engine, "graph TD; A-->B", temp_dir, "missing/example.svg"))

        assert isinstance(exc_info.value.original_error, OSError)
        assert exc_info.value.file_path.endswith("example.svg")

    def test_create_dirs(self, temp_dir: Path) -> None:
        """Test that create_dirs makes missing parents."""
        engine = FakeEngine()

        path = asyncio.run(
            render_to_file(engine, "graph TD; A-->B", temp_dir, "nested/dir/example.svg", create_dirs=True)
        )

        assert path.is_file()


@pytest.mark.unit
class TestHashedFileName:
    """Test derived file names."""

    def test_stable(self) -> None:
        """Test that equal sources share a name."""
        assert hashed_file_name("graph TD; A-->B") == hashed_file_name("graph TD; A-->B")

    def test_distinct(self) -> None:
        """Test that different sources get different names."""
        assert hashed_file_name("graph TD; A-->B") != hashed_file_name("graph TD; B-->A")

    def test_extension(self) -> None:
        """Test the extension and digest length."""
        name = hashed_file_name("graph TD; A-->B", "png")

        assert name.endswith(".png")
        assert len(name.split(".")[0]) == 40
