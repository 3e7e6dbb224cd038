#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagnostics.py
"""Per-document diagnostics.

A :class:`SourceFile` travels with a document through the diagram pass. It
records where the document lives (used to resolve output paths), holds the
serialized result, and collects :class:`DiagnosticMessage` entries for
problems that did not stop processing, such as a diagram that failed to
render and was left as a code block.

Examples
--------
    >>> source = SourceFile(path=Path("docs/README.md"))
    >>> _ = source.message("Diagram failed to render", origin="mdmermaid")
    >>> for msg in source.messages:
    ...     print(msg)
    docs/README.md:1:1: warning: Diagram failed to render [mdmermaid]

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NoReturn, Optional, Union

from mdmermaid.ast.nodes import SourceLocation
from mdmermaid.constants import DiagnosticSeverity
from mdmermaid.exceptions import DiagnosticError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


@dataclass
class DiagnosticMessage:
    """A single diagnostic attached to a source file.

    Parameters
    ----------
    reason : str
        Human-readable description
    severity : {"info", "warning", "error"}
        How serious the problem is
    line : int or None, default None
        1-based line in the source document
    column : int or None, default None
        1-based column in the source document
    origin : str or None, default None
        Component that produced the message
    file : str or None, default None
        Path of the document, when known
    fatal : bool, default False
        Whether processing of the document stopped
    cause : Exception or None, default None
        Exception the message was created from

    """

    reason: str
    severity: DiagnosticSeverity
    line: Optional[int] = None
    column: Optional[int] = None
    origin: Optional[str] = None
    file: Optional[str] = None
    fatal: bool = False
    cause: Optional[Exception] = field(default=None, compare=False, repr=False)

    @property
    def position(self) -> str:
        """Location formatted as ``line:column``."""
        return f"{self.line or 1}:{self.column or 1}"

    def __str__(self) -> str:
        """Format as ``file:line:column: severity: reason [origin]``."""
        prefix = f"{self.file}:{self.position}" if self.file else self.position
        text = f"{prefix}: {self.severity}: {self.reason}"
        if self.origin:
            text += f" [{self.origin}]"
        return text


@dataclass
class SourceFile:
    """A document being processed together with its diagnostics.

    Parameters
    ----------
    path : Path or None, default None
        Location of the document; None for documents read from a stream
    cwd : Path, default current directory
        Base for resolving a relative ``path``
    contents : str or None, default None
        Serialized output once processing is complete
    data : dict, default empty
        Free-form processing data; ``destination_dir`` overrides the
        directory rendered diagrams are written to
    messages : list of DiagnosticMessage, default empty
        Diagnostics collected so far

    """

    path: Optional[Path] = None
    cwd: Path = field(default_factory=Path.cwd)
    contents: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    messages: list[DiagnosticMessage] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Normalize path arguments given as strings."""
        if self.path is not None:
            self.path = Path(self.path)
        self.cwd = Path(self.cwd)

    @property
    def dirname(self) -> Path:
        """Directory containing the document (``cwd`` when there is no path)."""
        if self.path is None:
            return self.cwd
        return (self.cwd / self.path).parent

    @property
    def destination_dir(self) -> Path:
        """Directory generated files should go to.

        ``data["destination_dir"]`` when set (relative values are resolved
        against ``cwd``), otherwise :attr:`dirname`.
        """
        destination = self.data.get("destination_dir")
        if destination:
            return self.cwd / Path(destination)
        return self.dirname

    @property
    def display_name(self) -> str:
        """Name used when reporting on this document."""
        return str(self.path) if self.path is not None else "<stdin>"

    def _add(
        self,
        reason: Union[str, Exception],
        severity: DiagnosticSeverity,
        position: Optional[SourceLocation],
        origin: Optional[str],
        fatal: bool = False,
    ) -> DiagnosticMessage:
        cause = reason if isinstance(reason, Exception) else None
        message = DiagnosticMessage(
            reason=str(reason),
            severity=severity,
            line=position.line if position else None,
            column=position.column if position else None,
            origin=origin,
            file=str(self.path) if self.path is not None else None,
            fatal=fatal,
            cause=cause,
        )
        self.messages.append(message)
        logger.log(_LOG_LEVELS[severity], "%s", message)
        return message

    def info(
        self, reason: Union[str, Exception], position: Optional[SourceLocation] = None, origin: Optional[str] = None
    ) -> DiagnosticMessage:
        """Record an informational message."""
        return self._add(reason, "info", position, origin)

    def message(
        self, reason: Union[str, Exception], position: Optional[SourceLocation] = None, origin: Optional[str] = None
    ) -> DiagnosticMessage:
        """Record a warning; processing continues."""
        return self._add(reason, "warning", position, origin)

    def fail(
        self, reason: Union[str, Exception], position: Optional[SourceLocation] = None, origin: Optional[str] = None
    ) -> NoReturn:
        """Record a fatal error and raise it.

        Raises
        ------
        DiagnosticError
            Always

        """
        diagnostic = self._add(reason, "error", position, origin, fatal=True)
        original = reason if isinstance(reason, Exception) else None
        raise DiagnosticError(str(diagnostic), diagnostic=diagnostic, original_error=original)

    @property
    def warnings(self) -> list[DiagnosticMessage]:
        """Messages with warning severity."""
        return [m for m in self.messages if m.severity == "warning"]

    @property
    def errors(self) -> list[DiagnosticMessage]:
        """Messages with error severity."""
        return [m for m in self.messages if m.severity == "error"]
