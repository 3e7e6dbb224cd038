#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/cli/config.py
"""Configuration file discovery and loading for the mdmermaid CLI.

Configuration lives in ``.mdmermaid.toml``, ``.mdmermaid.yaml``/``.yml``,
``.mdmermaid.json`` or the ``[tool.mdmermaid]`` table of ``pyproject.toml``.
Two tables are recognized::

    [mermaid]
    output_dir = "images"
    reference_style = "full"

    [mmdc]
    theme = "dark"
    timeout = 30

``mermaid`` holds :class:`~mdmermaid.options.MermaidOptions` fields and
``mmdc`` holds :class:`~mdmermaid.options.MermaidCliOptions` fields.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import tomli_w
import yaml

from mdmermaid.constants import CONFIG_FILE_NAMES, PYPROJECT_TOOL_SECTION
from mdmermaid.exceptions import ValidationError
from mdmermaid.options.mermaid import MermaidCliOptions, MermaidOptions

CONFIG_SECTIONS = ("mermaid", "mmdc")


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.mdmermaid]`` table from a pyproject.toml file.

    Raises
    ------
    argparse.ArgumentTypeError
        If pyproject.toml cannot be parsed or the table is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading pyproject.toml {pyproject_path}: {e}") from e

    config = data.get("tool", {}).get(PYPROJECT_TOOL_SECTION, {})
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.{PYPROJECT_TOOL_SECTION}] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by searching parent directories.

    Each directory from ``start_dir`` up to the filesystem root is checked
    for the dedicated config files, in order, and then for a pyproject.toml
    that has a ``[tool.mdmermaid]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First config file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILE_NAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except argparse.ArgumentTypeError:
                # A broken pyproject.toml that is not ours does not stop the search
                pass

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the standard locations.

    Parent directories of ``start_dir`` (the current directory by default)
    are searched first, then the user's home directory.

    Returns
    -------
    Path or None
        Path to the discovered config file

    """
    config_in_parents = find_config_in_parents(start_dir)
    if config_in_parents:
        return config_in_parents

    home = Path.home()
    for filename in CONFIG_FILE_NAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    The format is chosen from the file name and extension.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read or parsed, or has an unsupported format

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")

    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration path is not a file: {config_path}")

    filename = config_path.name.lower()
    ext = config_path.suffix.lower()

    if filename == "pyproject.toml":
        return _load_pyproject_section(config_path)

    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            raise argparse.ArgumentTypeError(f"Unsupported config file format: {ext}. Use .toml, .yaml or .json")
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise argparse.ArgumentTypeError(f"Invalid config file {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading config file {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping at root level, got {type(config).__name__}"
        )
    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries with deep merging.

    Parameters
    ----------
    base : dict
        Base configuration
    override : dict
        Higher priority configuration

    Returns
    -------
    dict
        Merged configuration; nested dictionaries are merged, not replaced

    Examples
    --------
    >>> merge_configs({"mmdc": {"theme": "dark", "timeout": 10}}, {"mmdc": {"timeout": 30}})
    {'mmdc': {'theme': 'dark', 'timeout': 30}}

    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def load_config_with_priority(
    explicit_path: Optional[str] = None,
    env_var_path: Optional[str] = None,
    start_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration with proper priority handling.

    Priority order (highest to lowest):

    1. Explicit config file path (``--config``)
    2. Path from the ``MDMERMAID_CONFIG`` environment variable
    3. Auto-discovered config file

    Parameters
    ----------
    explicit_path : str, optional
        Path given with ``--config``
    env_var_path : str, optional
        Path from the environment
    start_dir : Path, optional
        Directory discovery starts from

    Returns
    -------
    dict
        Loaded configuration (empty when no file is found)

    Raises
    ------
    argparse.ArgumentTypeError
        If a config file is specified but cannot be loaded

    """
    if explicit_path:
        return load_config_file(explicit_path)

    if env_var_path:
        return load_config_file(env_var_path)

    discovered_path = discover_config_file(start_dir)
    if discovered_path:
        return load_config_file(discovered_path)

    return {}


def _check_keys(section: str, values: Any, allowed: set[str]) -> Dict[str, Any]:
    if not isinstance(values, dict):
        raise ValidationError(
            f"Config section [{section}] must be a table, got {type(values).__name__}",
            parameter_name=section,
            parameter_value=values,
        )
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise ValidationError(
            f"Unknown option(s) in [{section}]: {', '.join(unknown)}",
            parameter_name=section,
            parameter_value=unknown,
        )
    return values


def options_from_config(config: Dict[str, Any]) -> MermaidOptions:
    """Build diagram options from a loaded configuration.

    Parameters
    ----------
    config : dict
        Configuration with optional ``mermaid`` and ``mmdc`` tables

    Returns
    -------
    MermaidOptions
        Options with the configured values; everything else at its default

    Raises
    ------
    ValidationError
        If the configuration has unknown sections or keys, or a value is
        rejected by the options

    Examples
    --------
    >>> options = options_from_config({"mermaid": {"reference_style": "full"}, "mmdc": {"theme": "dark"}})
    >>> options.reference_style, options.engine_options.theme
    ('full', 'dark')

    """
    _check_keys("config", config, set(CONFIG_SECTIONS))

    mermaid_fields = {f.name for f in fields(MermaidOptions) if not f.metadata.get("exclude_from_config")}
    mermaid_fields.discard("engine_options")
    mmdc_fields = {f.name for f in fields(MermaidCliOptions)}

    mermaid_values = dict(_check_keys("mermaid", config.get("mermaid", {}), mermaid_fields))
    mmdc_values = dict(_check_keys("mmdc", config.get("mmdc", {}), mmdc_fields))

    if "extra_args" in mmdc_values:
        mmdc_values["extra_args"] = tuple(str(arg) for arg in mmdc_values["extra_args"])

    try:
        engine_options = MermaidCliOptions(**mmdc_values)
        return MermaidOptions(engine_options=engine_options, **mermaid_values)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid configuration: {e}", original_error=e) from e


def _config_value(value: Any) -> Any:
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, tuple):
        return list(value)
    return value


def format_config(options: MermaidOptions) -> str:
    """Format options as a commented TOML configuration file.

    Every configurable field is written with its help text as a comment.
    Fields whose value is None have no TOML form and are written commented
    out. The result loads back through :func:`load_config_file` and
    :func:`options_from_config`.

    Parameters
    ----------
    options : MermaidOptions
        Options to write

    Returns
    -------
    str
        TOML document with ``[mermaid]`` and ``[mmdc]`` tables

    """
    lines = ["# mdmermaid configuration"]
    for section, values in (("mermaid", options), ("mmdc", options.engine_options)):
        lines.extend(["", f"[{section}]"])
        for option_field in fields(values):
            if option_field.metadata.get("exclude_from_config") or option_field.name == "engine_options":
                continue
            help_text = option_field.metadata.get("help")
            if help_text:
                lines.append(f"# {help_text}")
            value = _config_value(getattr(values, option_field.name))
            if value is None:
                lines.append(f"# {option_field.name} =")
            else:
                lines.append(tomli_w.dumps({option_field.name: value}).rstrip("\n"))
    return "\n".join(lines) + "\n"
