"""Test utilities for the mdmermaid test suite.

:class:`FakeEngine` stands in for the Mermaid CLI so tests never need
``mmdc`` installed.
"""

import asyncio
from typing import Optional

from mdmermaid.diagrams.engine import RenderEngine
from mdmermaid.exceptions import RenderError

SAMPLE_DOCUMENT = """Hello world!

```mermaid file=example.svg name=Example_Diagram
graph TD;
    A-->B;
```

World, hello!
"""

EXPECTED_OUTPUT = """Hello world!

![Example_Diagram]

[Example_Diagram]: example.svg

World, hello!
"""


class FakeEngine(RenderEngine):
    """Recording render engine with configurable failures and delays.

    Parameters
    ----------
    failures : set of str, optional
        Diagram sources (stripped) that raise RenderError
    delays : dict, optional
        Seconds to sleep before rendering a given (stripped) source

    """

    name = "fake"

    def __init__(self, failures: Optional[set] = None, delays: Optional[dict] = None):
        self.failures = failures or set()
        self.delays = delays or {}
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def render(self, source: str) -> bytes:
        key = source.strip()
        self.calls.append(key)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key in self.failures:
                raise RenderError(f"Parse error on line 1: {key}")
            self.completed.append(key)
            return f"<svg><!-- {key} --></svg>".encode("utf-8")
        finally:
            self.active -= 1

    async def aclose(self) -> None:
        self.closed = True


def svg_for(source: str) -> bytes:
    """Bytes FakeEngine produces for ``source``."""
    return f"<svg><!-- {source.strip()} --></svg>".encode("utf-8")
