#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Base classes for option dataclasses.

All options in mdmermaid are frozen dataclasses so they can be shared between
concurrently running tasks. Use ``create_updated`` to derive a modified copy.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mdmermaid.exceptions import InvalidOptionsError


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class BaseRendererOptions(CloneFrozenMixin):
    """Base class for serializer options."""


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for parser options.

    Parameters
    ----------
    extract_metadata : bool
        Whether to extract document metadata (frontmatter)

    """

    extract_metadata: bool = field(
        default=True,
        metadata={"help": "Extract frontmatter into document metadata"},
    )


def validate_options_type(options: Any, expected_type: type, component_name: str) -> None:
    """Check that ``options`` is None or an instance of ``expected_type``.

    Raises
    ------
    InvalidOptionsError
        If options are given with the wrong class

    """
    if options is not None and not isinstance(options, expected_type):
        raise InvalidOptionsError(
            component_name=component_name,
            expected_type=expected_type,
            received_type=type(options),
        )


def field_choices(options_class: type, name: str) -> list[str]:
    """Return the allowed values recorded in a field's ``choices`` metadata.

    Raises
    ------
    KeyError
        If ``options_class`` has no field called ``name``

    """
    for option_field in fields(options_class):
        if option_field.name == name:
            return list(option_field.metadata.get("choices", []))
    raise KeyError(name)
