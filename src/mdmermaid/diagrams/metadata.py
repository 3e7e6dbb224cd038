#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/metadata.py
"""Parsing of diagram code block annotations.

A diagram block carries its settings after the language on the fence line::

    ```mermaid file=docs/flow.svg name=Flow alt=Request-flow
    graph TD; A-->B
    ```

Parsing is purely lexical. The annotation is split on whitespace, each
token is split on its first ``=``, tokens without ``=`` are ignored, and a
repeated key keeps its last value. There is no quoting, so values cannot
contain whitespace.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

REQUIRED_KEYS = ("file", "name")


@dataclass(frozen=True)
class DiagramMetadata:
    """Complete annotation of a diagram block.

    Parameters
    ----------
    file : str
        Output path of the rendered image, relative to the output directory
    name : str
        Label of the generated image reference and definition
    alt : str or None, default None
        Alternative text; the name is used when absent

    """

    file: str
    name: str
    alt: Optional[str] = None

    @property
    def identifier(self) -> str:
        """Normalized identifier shared by the reference and its definition."""
        return self.name.lower()


@dataclass(frozen=True)
class IncompleteMetadata:
    """Annotation that lacks a required key.

    Blocks with incomplete metadata are left untouched.

    Parameters
    ----------
    missing : tuple of str
        Required keys that were absent or empty
    fields : dict
        Everything that was parsed

    """

    missing: tuple[str, ...]
    fields: dict[str, str] = field(default_factory=dict)


ParsedMetadata = Union[DiagramMetadata, IncompleteMetadata]


def parse_meta(meta: Optional[str]) -> dict[str, str]:
    """Split an annotation string into a key/value mapping.

    Parameters
    ----------
    meta : str or None
        Annotation text following the language on the fence line

    Returns
    -------
    dict
        Parsed pairs; later keys override earlier ones

    Examples
    --------
    >>> parse_meta("file=a.svg name=A file=b.svg")
    {'file': 'b.svg', 'name': 'A'}
    >>> parse_meta("bare theme=dark url=x?a=b")
    {'theme': 'dark', 'url': 'x?a=b'}

    """
    pairs: dict[str, str] = {}
    if not meta:
        return pairs

    for token in meta.split():
        key, sep, value = token.partition("=")
        if not sep or not key:
            continue
        pairs[key] = value

    return pairs


def parse_diagram_metadata(meta: Optional[str]) -> ParsedMetadata:
    """Parse and validate the annotation of a diagram block.

    Parameters
    ----------
    meta : str or None
        Annotation text following the language on the fence line

    Returns
    -------
    DiagramMetadata or IncompleteMetadata
        ``DiagramMetadata`` when ``file`` and ``name`` are both present and
        non-empty, otherwise ``IncompleteMetadata`` naming what is missing

    """
    fields = parse_meta(meta)
    missing = tuple(key for key in REQUIRED_KEYS if not fields.get(key))
    if missing:
        return IncompleteMetadata(missing=missing, fields=fields)

    return DiagramMetadata(file=fields["file"], name=fields["name"], alt=fields.get("alt") or None)
