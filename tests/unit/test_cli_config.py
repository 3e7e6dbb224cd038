#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for configuration loading."""
import argparse
import json
from pathlib import Path

import pytest

from mdmermaid.cli.config import (
    discover_config_file,
    format_config,
    find_config_in_parents,
    load_config_file,
    load_config_with_priority,
    merge_configs,
    options_from_config,
)
from mdmermaid.exceptions import ValidationError


@pytest.mark.unit
@pytest.mark.cli
class TestLoadConfigFile:
    """Test load_config_file."""

    def test_toml(self, temp_dir: Path) -> None:
        """Test a TOML config."""
        path = temp_dir / ".mdmermaid.toml"
        path.write_text('[mmdc]\ntheme = "dark"\n', encoding="utf-8")

        assert load_config_file(path) == {"mmdc": {"theme": "dark"}}

    def test_yaml(self, temp_dir: Path) -> None:
        """Test a YAML config."""
        path = temp_dir / "config.yml"
        path.write_text("mermaid:\n  reference_style: full\n", encoding="utf-8")

        assert load_config_file(path) == {"mermaid": {"reference_style": "full"}}

    def test_json(self, temp_dir: Path) -> None:
        """Test a JSON config."""
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"mmdc": {"timeout": 30}}), encoding="utf-8")

        assert load_config_file(str(path)) == {"mmdc": {"timeout": 30}}

    def test_pyproject(self, temp_dir: Path) -> None:
        """Test the [tool.mdmermaid] table."""
        path = temp_dir / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n\n[tool.mdmermaid.mermaid]\nsimple = true\n', encoding="utf-8")

        assert load_config_file(path) == {"mermaid": {"simple": True}}

    def test_empty_yaml(self, temp_dir: Path) -> None:
        """Test that an empty file is an empty config."""
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config_file(path) == {}

    def test_missing(self, temp_dir: Path) -> None:
        """Test that a missing file raises ArgumentTypeError."""
        with pytest.raises(argparse.ArgumentTypeError, match="does not exist"):
            load_config_file(temp_dir / "nope.toml")

    def test_unsupported_extension(self, temp_dir: Path) -> None:
        """Test that unknown formats are rejected."""
        path = temp_dir / "config.ini"
        path.write_text("[mmdc]\n", encoding="utf-8")

        with pytest.raises(argparse.ArgumentTypeError, match="Unsupported"):
            load_config_file(path)

    def test_invalid_toml(self, temp_dir: Path) -> None:
        """Test that syntax errors are reported."""
        path = temp_dir / "config.toml"
        path.write_text("[mmdc\n", encoding="utf-8")

        with pytest.raises(argparse.ArgumentTypeError, match="Invalid config file"):
            load_config_file(path)

    def test_non_mapping_root(self, temp_dir: Path) -> None:
        """Test that a list at the root is rejected."""
        path = temp_dir / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(argparse.ArgumentTypeError, match="mapping"):
            load_config_file(path)


@pytest.mark.unit
@pytest.mark.cli
class TestDiscovery:
    """Test config discovery and priority."""

    def test_found_in_parent(self, temp_dir: Path) -> None:
        """Test that a config in a parent directory is found."""
        config = temp_dir / ".mdmermaid.yaml"
        config.write_text("mmdc:\n  theme: forest\n", encoding="utf-8")
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_in_parents(nested) == config.resolve()

    def test_pyproject_without_section_skipped(self, temp_dir: Path) -> None:
        """Test that a pyproject.toml without our table is not a config."""
        (temp_dir / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
        config = temp_dir / ".mdmermaid.toml"

        assert find_config_in_parents(temp_dir) != temp_dir.resolve() / "pyproject.toml"
        config.write_text("[mmdc]\n", encoding="utf-8")
        assert find_config_in_parents(temp_dir) == config.resolve()

    def test_home_fallback(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the home directory is checked last."""
        home = temp_dir / "home"
        home.mkdir()
        (home / ".mdmermaid.json").write_text("{}", encoding="utf-8")
        work = temp_dir / "work"
        work.mkdir()
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
        monkeypatch.setattr("mdmermaid.cli.config.find_config_in_parents", lambda start_dir=None: None)

        assert discover_config_file(work) == home / ".mdmermaid.json"

    def test_priority(self, temp_dir: Path) -> None:
        """Test that the explicit path beats the environment path and discovery."""
        explicit = temp_dir / "explicit.toml"
        explicit.write_text('[mmdc]\ntheme = "dark"\n', encoding="utf-8")
        env = temp_dir / "env.toml"
        env.write_text('[mmdc]\ntheme = "forest"\n', encoding="utf-8")
        (temp_dir / ".mdmermaid.toml").write_text('[mmdc]\ntheme = "neutral"\n', encoding="utf-8")

        assert load_config_with_priority(str(explicit), str(env), temp_dir)["mmdc"]["theme"] == "dark"
        assert load_config_with_priority(None, str(env), temp_dir)["mmdc"]["theme"] == "forest"
        assert load_config_with_priority(None, None, temp_dir)["mmdc"]["theme"] == "neutral"


@pytest.mark.unit
@pytest.mark.cli
class TestOptionsFromConfig:
    """Test turning configuration into options."""

    def test_empty(self) -> None:
        """Test that an empty config gives default options."""
        assert options_from_config({}) == options_from_config({"mermaid": {}, "mmdc": {}})

    def test_values(self) -> None:
        """Test that both sections are applied."""
        options = options_from_config(
            {
                "mermaid": {"reference_style": "full", "output_dir": "images"},
                "mmdc": {"theme": "dark", "timeout": 30, "extra_args": ["--cssFile", "style.css"]},
            }
        )

        assert options.reference_style == "full"
        assert options.output_dir == "images"
        assert options.engine_options.theme == "dark"
        assert options.engine_options.timeout == 30
        assert options.engine_options.extra_args == ("--cssFile", "style.css")

    def test_unknown_section(self) -> None:
        """Test that unknown sections are rejected."""
        with pytest.raises(ValidationError, match="Unknown option"):
            options_from_config({"diagrams": {}})

    def test_unknown_key(self) -> None:
        """Test that unknown keys are rejected with their names."""
        with pytest.raises(ValidationError) as exc_info:
            options_from_config({"mmdc": {"colour": "red"}})

        assert exc_info.value.parameter_value == ["colour"]

    def test_engine_not_configurable(self) -> None:
        """Test that the engine instance cannot come from a file."""
        with pytest.raises(ValidationError):
            options_from_config({"mermaid": {"engine": "mmdc"}})

    def test_invalid_value(self) -> None:
        """Test that option validation errors become ValidationError."""
        with pytest.raises(ValidationError, match="Invalid configuration") as exc_info:
            options_from_config({"mmdc": {"theme": "solarized"}})

        assert isinstance(exc_info.value.original_error, ValueError)

    def test_section_must_be_table(self) -> None:
        """Test that a scalar section is rejected."""
        with pytest.raises(ValidationError, match="must be a table"):
            options_from_config({"mmdc": "dark"})


@pytest.mark.unit
@pytest.mark.cli
class TestMergeConfigs:
    """Test merge_configs."""

    def test_deep_merge(self) -> None:
        """Test that nested tables are merged."""
        base = {"mmdc": {"theme": "dark", "timeout": 10}, "mermaid": {"simple": False}}
        override = {"mmdc": {"timeout": 30}}

        assert merge_configs(base, override) == {"mmdc": {"theme": "dark", "timeout": 30}, "mermaid": {"simple": False}}

    def test_base_unchanged(self) -> None:
        """Test that the inputs are not modified."""
        base = {"mmdc": {"theme": "dark"}}

        merge_configs(base, {"mmdc": {"theme": "forest"}})

        assert base == {"mmdc": {"theme": "dark"}}


@pytest.mark.unit
@pytest.mark.cli
class TestFormatConfig:
    """Test writing options back as TOML."""

    def test_round_trip(self, temp_dir: Path) -> None:
        """Test that the written file loads back to the same options."""
        options = options_from_config(
            {
                "mermaid": {"output_dir": "images", "reference_style": "collapsed", "absolute_urls": True},
                "mmdc": {"theme": "dark", "timeout": 12.5, "extra_args": ["--cssFile", "style.css"]},
            }
        )
        path = temp_dir / ".mdmermaid.toml"
        path.write_text(format_config(options), encoding="utf-8")

        assert options_from_config(load_config_file(path)) == options

    def test_help_comments_and_unset_values(self) -> None:
        """Test that fields carry their help text and None values are commented out."""
        text = format_config(options_from_config({}))

        assert "[mermaid]\n" in text
        assert "[mmdc]\n" in text
        assert "# Mermaid theme\ntheme = \"default\"\n" in text
        assert "# timeout =\n" in text
        assert "\nengine =" not in text
