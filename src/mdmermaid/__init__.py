"""mdmermaid - render Mermaid diagrams in Markdown documents.

mdmermaid finds fenced code blocks written in the Mermaid diagram language,
renders each one to an image with the Mermaid CLI (``mmdc``) and replaces the
block with a reference-style image and its definition::

    ```mermaid file=example.svg name=Example_Diagram
    graph TD; A-->B
    ```

becomes::

    ![Example_Diagram]

    [Example_Diagram]: example.svg

Diagrams render concurrently. A diagram that fails to render keeps its code
block and is reported as a warning on the document's
:class:`~mdmermaid.diagnostics.SourceFile`.

Requirements
------------
- Python 3.10+
- The Mermaid CLI: ``npm install -g @mermaid-js/mermaid-cli``

Examples
--------
Process a document:

    >>> from mdmermaid import process
    >>> result = process(Path("README.md"))
    >>> print(result.contents)
    >>> for message in result.messages:
    ...     print(message)

Work with the tree directly:

    >>> import asyncio
    >>> from mdmermaid import render_diagrams, to_ast, to_markdown
    >>> doc = to_ast(Path("README.md"))
    >>> doc = asyncio.run(render_diagrams(doc))
    >>> print(to_markdown(doc))

See Also
--------
mdmermaid.ast : Document tree nodes and traversal
mdmermaid.diagrams : The diagram rendering pass

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

__version__ = "0.1.0"

from mdmermaid.api import aprocess, aprocess_file, process, process_file, to_ast, to_markdown
from mdmermaid.diagnostics import DiagnosticMessage, SourceFile
from mdmermaid.diagrams import (
    MermaidCliEngine,
    MermaidRenderTransform,
    RenderEngine,
    create_engine,
    render_diagrams,
)
from mdmermaid.exceptions import (
    DependencyError,
    MdMermaidError,
    OutputWriteError,
    ParsingError,
    RenderError,
    TransformError,
)
from mdmermaid.options import (
    MarkdownParserOptions,
    MarkdownRendererOptions,
    MermaidCliOptions,
    MermaidOptions,
)

__all__ = [
    "__version__",
    "aprocess",
    "aprocess_file",
    "process",
    "process_file",
    "to_ast",
    "to_markdown",
    "render_diagrams",
    "MermaidRenderTransform",
    "RenderEngine",
    "MermaidCliEngine",
    "create_engine",
    "SourceFile",
    "DiagnosticMessage",
    "MarkdownParserOptions",
    "MarkdownRendererOptions",
    "MermaidCliOptions",
    "MermaidOptions",
    "MdMermaidError",
    "DependencyError",
    "OutputWriteError",
    "ParsingError",
    "RenderError",
    "TransformError",
]
