#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/utils/decorators.py
"""Timing and dependency helpers shared by the engine and the API layer."""

from __future__ import annotations

import logging
import shutil
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator

from mdmermaid.exceptions import DependencyError


def require_executable(component_name: str, executable: str, install_command: str = "") -> str:
    """Resolve an external executable on ``PATH`` or raise.

    Parameters
    ----------
    component_name : str
        Name of the component that needs the executable, used in the error
    executable : str
        Executable name or path
    install_command : str, optional
        Suggested install command included in the error message

    Returns
    -------
    str
        Absolute path of the executable

    Raises
    ------
    DependencyError
        If the executable cannot be found

    """
    resolved = shutil.which(executable)
    if resolved is None:
        raise DependencyError(
            component_name=component_name,
            missing_packages=[(executable, "")],
            install_command=install_command,
        )
    return resolved


def timed(logger: logging.Logger, operation: str) -> Callable:
    """Wrap a coroutine function so that its duration is logged at DEBUG level.

    Examples
    --------
        >>> @timed(logger, "Rendering diagram")
        ... async def render(self, source):
        ...     ...

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with debug_timer(logger, operation):
                return await func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Time the enclosed block and log the elapsed time at DEBUG level.

    Parameters
    ----------
    logger : logging.Logger
        Logger instance to use for DEBUG messages
    operation : str
        Description of the operation being timed

    Notes
    -----
    Nothing is measured when the logger has DEBUG disabled.

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.2f}s")
    else:
        yield
