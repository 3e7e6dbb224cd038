#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/utils/frontmatter.py

"""Frontmatter extraction and formatting.

Documents may start with a YAML block delimited by ``---`` or a TOML block
delimited by ``+++``. Parsing relies on PyYAML and tomllib; writing relies on
PyYAML and tomli_w.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any

import tomli_w
import yaml

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

from mdmermaid.constants import MetadataFormatType

logger = logging.getLogger(__name__)

_DELIMITERS: dict[MetadataFormatType, str] = {"yaml": "---", "toml": "+++"}


@dataclass
class Frontmatter:
    """Result of splitting frontmatter from a document.

    Parameters
    ----------
    body : str
        Document text following the frontmatter block
    data : dict
        Parsed frontmatter values (empty when there is no block)
    format : {"yaml", "toml"} or None
        Format of the block that was found
    line_count : int
        Number of source lines consumed by the block, delimiters included

    """

    body: str
    data: dict[str, Any] = field(default_factory=dict)
    format: MetadataFormatType | None = None
    line_count: int = 0


def _find_block(content: str, delimiter: str) -> tuple[str, str, int] | None:
    if not (content.startswith(delimiter + "\n") or content.startswith(delimiter + "\r\n")):
        return None

    lines = content.splitlines(keepends=True)
    for i in range(1, len(lines)):
        if lines[i].strip() == delimiter:
            return "".join(lines[1:i]), "".join(lines[i + 1 :]), i + 1

    return None


def split_frontmatter(content: str) -> Frontmatter:
    """Split a leading YAML or TOML frontmatter block from ``content``.

    A block that fails to parse, or that does not hold a mapping, is left in
    place so it survives a round trip untouched.

    Parameters
    ----------
    content : str
        Full document text

    Returns
    -------
    Frontmatter
        The remaining body and the parsed values

    """
    for fmt, delimiter in _DELIMITERS.items():
        block = _find_block(content, delimiter)
        if block is None:
            continue

        raw, body, line_count = block
        try:
            data = yaml.safe_load(raw) if fmt == "yaml" else tomllib.loads(raw)
        except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            logger.warning("Ignoring unparseable %s frontmatter: %s", fmt.upper(), e)
            return Frontmatter(body=content)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s frontmatter that is not a mapping", fmt.upper())
            return Frontmatter(body=content)

        return Frontmatter(body=body, data=data, format=fmt, line_count=line_count)

    return Frontmatter(body=content)


def format_frontmatter(metadata: dict[str, Any], fmt: MetadataFormatType = "yaml") -> str:
    """Format metadata as a frontmatter block.

    Parameters
    ----------
    metadata : dict
        Values to write
    fmt : {"yaml", "toml"}, default "yaml"
        Output format

    Returns
    -------
    str
        Frontmatter with delimiters and a trailing newline, or an empty
        string when there is nothing to write

    Examples
    --------
    >>> print(format_frontmatter({"title": "Diagrams"}), end="")
    ---
    title: Diagrams
    ---

    """
    if not metadata:
        return ""

    if fmt == "toml":
        content = tomli_w.dumps(metadata)
    else:
        content = yaml.safe_dump(metadata, sort_keys=False, default_flow_style=False, allow_unicode=True)

    if not content.endswith("\n"):
        content += "\n"

    delimiter = _DELIMITERS[fmt]
    return f"{delimiter}\n{content}{delimiter}\n"
