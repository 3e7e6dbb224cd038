#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for mdmermaid.

Constants are organized by category:
1. Type Definitions - Literal types shared by options and nodes
2. Diagram Handling - Markers, names and rendering defaults
3. Markdown Formatting - Serializer defaults
4. Configuration Files - Names used during config discovery
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

ReferenceStyle = Literal["full", "collapsed", "shortcut"]
DiagramOutputFormat = Literal["svg", "png", "pdf"]
MermaidTheme = Literal["default", "forest", "dark", "neutral"]
DiagnosticSeverity = Literal["info", "warning", "error"]
EmphasisSymbol = Literal["*", "_"]
BulletSymbols = Literal["-", "*", "+"]
CodeFenceChar = Literal["`", "~"]
MetadataFormatType = Literal["yaml", "toml"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

# =============================================================================
# Diagram Handling
# =============================================================================

# Origin attached to every diagnostic raised by the diagram pass
PLUGIN_NAME = "mdmermaid"

DEFAULT_DIAGRAM_MARKER = "mermaid"
DEFAULT_REFERENCE_STYLE: ReferenceStyle = "shortcut"
DEFAULT_LINK_TITLE_MARKER = "mermaid:"

# Mermaid CLI (mermaid-js/mermaid-cli)
DEFAULT_MMDC_EXECUTABLE = "mmdc"
DEFAULT_DIAGRAM_OUTPUT_FORMAT: DiagramOutputFormat = "svg"
DEFAULT_MERMAID_THEME: MermaidTheme = "default"
DEFAULT_BACKGROUND_COLOR = "white"
DEFAULT_RENDER_CONCURRENCY = 4
DEFAULT_PUPPETEER_SANDBOX_ARGS = ("--no-sandbox",)

# Simple mode wraps the diagram source for client-side rendering
SIMPLE_MODE_TEMPLATE = '<div class="mermaid">\n  {source}\n</div>'

# =============================================================================
# Markdown Formatting
# =============================================================================

DEFAULT_EMPHASIS_SYMBOL: EmphasisSymbol = "*"
DEFAULT_BULLET_SYMBOLS = "*-+"
DEFAULT_CODE_FENCE_CHAR: CodeFenceChar = "`"
DEFAULT_CODE_FENCE_MIN = 3
DEFAULT_LIST_INDENT_WIDTH = 4
DEFAULT_METADATA_FORMAT: MetadataFormatType = "yaml"

# =============================================================================
# Configuration Files
# =============================================================================

CONFIG_FILE_NAMES = (".mdmermaid.toml", ".mdmermaid.yaml", ".mdmermaid.yml", ".mdmermaid.json")
CONFIG_ENV_VAR = "MDMERMAID_CONFIG"
PYPROJECT_TOOL_SECTION = "mdmermaid"

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
