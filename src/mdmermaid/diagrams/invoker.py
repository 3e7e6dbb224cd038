#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/diagrams/invoker.py
"""Render a diagram and write it to disk."""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
from pathlib import Path
from typing import Union

from mdmermaid.constants import PLUGIN_NAME
from mdmermaid.diagrams.engine import RenderEngine
from mdmermaid.exceptions import OutputWriteError

logger = logging.getLogger(__name__)


def _write_bytes(path: Path, data: bytes, create_dirs: bool) -> None:
    if create_dirs:
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def render_to_file(
    engine: RenderEngine,
    source: str,
    output_dir: Union[str, Path],
    file_name: Union[str, Path],
    *,
    create_dirs: bool = False,
) -> Path:
    """Render ``source`` and write the image to ``output_dir / file_name``.

    Rendering the same source to the same path again overwrites the file
    with identical content, so the operation is safe to retry.

    Parameters
    ----------
    engine : RenderEngine
        Shared render engine
    source : str
        Diagram source text
    output_dir : str or Path
        Base directory
    file_name : str or Path
        Path of the image relative to ``output_dir`` (an absolute path is
        used as is)
    create_dirs : bool, default False
        Create missing parent directories before writing

    Returns
    -------
    Path
        Resolved path of the written file

    Raises
    ------
    RenderError
        If the engine fails
    OutputWriteError
        If the file cannot be written

    """
    target = (Path(output_dir) / file_name).resolve()

    data = await engine.render(source)

    try:
        await asyncio.to_thread(_write_bytes, target, data, create_dirs)
    except OSError as e:
        raise OutputWriteError(str(target), message=f"Failed to write diagram to {target}: {e}", original_error=e) from e

    logger.debug("Wrote %d bytes to %s", len(data), target)
    return target


def hashed_file_name(source: str, extension: str = "svg") -> str:
    """Derive a stable file name from diagram source.

    Used for diagrams that do not declare their own output file. The name is
    an HMAC-SHA1 digest of the source keyed with the tool name, so identical
    diagrams share one file.

    Parameters
    ----------
    source : str
        Diagram source text
    extension : str, default "svg"
        File extension without the dot

    Returns
    -------
    str
        File name such as ``3f786850e387550fdab836ed7e6dc881de23001b.svg``

    """
    digest = hmac.new(PLUGIN_NAME.encode("utf-8"), source.encode("utf-8"), hashlib.sha1).hexdigest()
    return f"{digest}.{extension}"
