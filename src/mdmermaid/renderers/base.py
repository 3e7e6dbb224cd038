#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/renderers/base.py
"""Base classes for document tree renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import TextIOBase
from pathlib import Path
from typing import IO, Union

from mdmermaid.ast import Document
from mdmermaid.ast.nodes import Node
from mdmermaid.options.base import BaseRendererOptions


class BaseRenderer(ABC):
    """Abstract base class for renderers.

    Parameters
    ----------
    options : BaseRendererOptions or None, default = None
        Format-specific rendering options

    """

    def __init__(self, options: BaseRendererOptions | None = None):
        """Initialize the renderer with optional configuration."""
        self.options = options

    @abstractmethod
    def render(self, doc: Document, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render the document and write it to ``output``.

        Parameters
        ----------
        doc : Document
            Document to render
        output : str, Path, IO[bytes] or IO[str]
            File path or file-like object

        """

    def render_to_string(self, doc: Document) -> str:
        """Render the document to a string.

        Raises
        ------
        NotImplementedError
            If the renderer does not produce text

        """
        raise NotImplementedError(f"{self.__class__.__name__} does not support rendering to a string.")

    @staticmethod
    def write_text_output(text: str, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Write text to a file path or a text/binary stream as UTF-8.

        Parameters
        ----------
        text : str
            Rendered text
        output : str, Path, IO[bytes] or IO[str]
            Output destination

        Raises
        ------
        TypeError
            If ``output`` is not a path or a writable stream

        """
        if isinstance(output, (str, Path)):
            Path(output).write_text(text, encoding="utf-8", newline="\n")
        elif isinstance(output, TextIOBase) or hasattr(output, "encoding"):
            output.write(text)  # type: ignore[arg-type]
        elif hasattr(output, "write"):
            output.write(text.encode("utf-8"))  # type: ignore[arg-type]
        else:
            raise TypeError(f"Unsupported output type: {type(output).__name__}")


class InlineContentMixin:
    """Mixin providing inline content rendering for text renderers.

    The implementing class must keep its output in a ``_output`` list and
    have visitor methods that append to it.

    """

    _output: list[str]

    def _render_inline_content(self, content: list[Node]) -> str:
        """Render a list of inline nodes to text.

        Parameters
        ----------
        content : list of Node
            Inline nodes to render

        Returns
        -------
        str
            Rendered inline content

        """
        saved_output = self._output
        self._output = []

        for node in content:
            node.accept(self)

        result = "".join(self._output)
        self._output = saved_output
        return result
