#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for frontmatter splitting and formatting."""
import pytest

from mdmermaid.utils.frontmatter import format_frontmatter, split_frontmatter


@pytest.mark.unit
class TestSplitFrontmatter:
    """Test split_frontmatter."""

    def test_yaml(self) -> None:
        """Test a YAML block."""
        result = split_frontmatter("---\ntitle: Hello\ntags: [a, b]\n---\nBody\n")

        assert result.data == {"title": "Hello", "tags": ["a", "b"]}
        assert result.format == "yaml"
        assert result.body == "Body\n"
        assert result.line_count == 4

    def test_toml(self) -> None:
        """Test a TOML block."""
        result = split_frontmatter('+++\ntitle = "Hello"\n+++\nBody\n')

        assert result.data == {"title": "Hello"}
        assert result.format == "toml"
        assert result.line_count == 3

    def test_no_frontmatter(self) -> None:
        """Test that plain documents come back unchanged."""
        result = split_frontmatter("# Title\n\n---\n")

        assert result.body == "# Title\n\n---\n"
        assert result.data == {}
        assert result.format is None
        assert result.line_count == 0

    def test_unclosed_block(self) -> None:
        """Test that an unclosed block is not frontmatter."""
        text = "---\ntitle: x\n\nBody\n"

        assert split_frontmatter(text).body == text

    def test_invalid_yaml_left_in_place(self) -> None:
        """Test that unparseable YAML is left in the body."""
        text = "---\ntitle: [unclosed\n---\nBody\n"

        result = split_frontmatter(text)

        assert result.body == text
        assert result.format is None

    def test_non_mapping_left_in_place(self) -> None:
        """Test that a YAML list is not treated as metadata."""
        text = "---\n- a\n- b\n---\nBody\n"

        assert split_frontmatter(text).body == text

    def test_empty_block(self) -> None:
        """Test that an empty block yields empty metadata."""
        result = split_frontmatter("---\n---\nBody\n")

        assert result.data == {}
        assert result.format == "yaml"
        assert result.body == "Body\n"


@pytest.mark.unit
class TestFormatFrontmatter:
    """Test format_frontmatter."""

    def test_yaml(self) -> None:
        """Test YAML output keeps key order."""
        assert format_frontmatter({"title": "T", "author": "A"}) == "---\ntitle: T\nauthor: A\n---\n"

    def test_toml(self) -> None:
        """Test TOML output."""
        assert format_frontmatter({"title": "T"}, "toml") == '+++\ntitle = "T"\n+++\n'

    def test_empty(self) -> None:
        """Test that empty metadata writes nothing."""
        assert format_frontmatter({}) == ""
