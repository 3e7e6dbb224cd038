#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for mdmermaid.

Exception Hierarchy
-------------------
- MdMermaidError (base exception)

  - ValidationError (parameter/option/config validation)
    - InvalidOptionsError (wrong options class for a component)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - FileAccessError (permissions, unreadable files)

  - ParsingError (input that is not UTF-8 text)

  - RenderingError (output generation failures)
    - RenderError (the diagram engine could not render a diagram)
    - OutputWriteError (a rendered artifact could not be written)

  - TransformError (structural failures while rebuilding the tree)

  - DiagnosticError (a fatal diagnostic was raised on a source file)

  - DependencyError (missing external tools or packages)

Render and write failures are recoverable: the diagram pass turns them into
diagnostics and keeps the original node unless asked to fail fast. Structural
failures and missing dependencies always propagate.

"""

from typing import Any


class MdMermaidError(Exception):
    """Base exception class for all mdmermaid-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MdMermaidError):
    """Exception raised for invalid parameters, options or configuration values.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when a component receives an options object of the wrong class.

    Parameters
    ----------
    component_name : str
        Name of the component that received invalid options
    expected_type : type
        The expected options class
    received_type : type
        The options class that was received

    """

    def __init__(
        self,
        component_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{component_name} expected options of type '{expected_type.__name__}', "
                f"got '{received_type.__name__}'"
            )
        super().__init__(message, parameter_name="options", parameter_value=received_type, original_error=original_error)
        self.component_name = component_name
        self.expected_type = expected_type
        self.received_type = received_type


class FileError(MdMermaidError):
    """Base exception for file access problems.

    Attributes
    ----------
    file_path : str or None
        Path to the file that caused the error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when a file cannot be found."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FileAccessError(FileError):
    """Exception raised when a file exists but cannot be read."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file access error."""
        if message is None:
            message = f"Cannot access file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class ParsingError(MdMermaidError):
    """Exception raised when input cannot be read as Markdown text.

    Markdown itself never fails to parse; this covers input that is not
    valid UTF-8.

    Attributes
    ----------
    source_name : str or None
        Path of the input, or None for in-memory bytes

    """

    def __init__(self, message: str, source_name: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.source_name = source_name


class RenderingError(MdMermaidError):
    """Base exception for failures producing a diagram artifact.

    The diagram pass recovers from these per node. Engine failures and
    file system failures are separate subclasses.
    """


class RenderError(RenderingError):
    """Exception raised when the diagram engine fails to render a diagram.

    Covers invalid diagram syntax, engine crashes and timeouts.

    Parameters
    ----------
    message : str
        Description of the failure
    engine_output : str, optional
        Diagnostic output captured from the engine (e.g. the CLI's stderr)
    original_error : Exception, optional
        The underlying exception

    """

    def __init__(self, message: str, engine_output: str | None = None, original_error: Exception | None = None):
        """Initialize the render error."""
        super().__init__(message, original_error)
        self.engine_output = engine_output


class OutputWriteError(RenderingError):
    """Exception raised when a rendered artifact or output document cannot be written.

    Attributes
    ----------
    file_path : str
        Destination that could not be written

    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the output write error."""
        if message is None:
            message = f"Cannot write {file_path}"
            if original_error is not None:
                message += f": {original_error}"
        super().__init__(message, original_error)
        self.file_path = file_path


class TransformError(MdMermaidError):
    """Exception raised when rebuilding the document tree fails.

    Attributes
    ----------
    transform_name : str or None
        Name of the transform that failed

    """

    def __init__(self, message: str, transform_name: str | None = None, original_error: Exception | None = None):
        """Initialize the transform error."""
        super().__init__(message, original_error)
        self.transform_name = transform_name


class DiagnosticError(MdMermaidError):
    """Exception raised by ``SourceFile.fail`` for a fatal diagnostic.

    Attributes
    ----------
    diagnostic : DiagnosticMessage
        The fatal message that was recorded

    """

    def __init__(self, message: str, diagnostic: Any = None, original_error: Exception | None = None):
        """Initialize the diagnostic error."""
        super().__init__(message, original_error)
        self.diagnostic = diagnostic


class DependencyError(MdMermaidError):
    """Exception raised when a required external tool or package is unavailable.

    Parameters
    ----------
    component_name : str
        Name of the component requiring the dependency
    missing_packages : list[tuple[str, str]]
        List of (name, version_spec) tuples for missing packages or tools
    install_command : str, optional
        Suggested command to resolve the issue
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        component_name: str,
        missing_packages: list[tuple[str, str]],
        install_command: str = "",
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the dependency error with package details."""
        if message is None:
            pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
            message = f"{component_name} requires the following to be installed: {pkg_list}"
            if install_command:
                message += f"\nInstall with: {install_command}"

        super().__init__(message, original_error)
        self.component_name = component_name
        self.missing_packages = missing_packages
        self.install_command = install_command
