#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdmermaid/ast/transforms.py
"""Tree transformation and traversal utilities.

The central piece is :class:`AsyncNodeTransformer`, a bottom-up rewriter in
which every node may be replaced by zero, one or several nodes and in which
the children of a container are transformed concurrently.

Examples
--------
Drop every thematic break from a document:

    >>> class DropBreaks(AsyncNodeTransformer):
    ...     async def transform_node(self, node):
    ...         return [] if isinstance(node, ThematicBreak) else [node]
    >>>
    >>> new_doc = asyncio.run(DropBreaks().transform_document(doc))

Find every code block:

    >>> blocks = extract_nodes(doc, CodeBlock)

"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterator, Type

from mdmermaid.ast.nodes import Document, Node, get_node_children, replace_node_children
from mdmermaid.exceptions import TransformError

logger = logging.getLogger(__name__)


class AsyncNodeTransformer:
    """Base class for asynchronous, splicing tree transformers.

    ``transform`` walks the tree bottom-up. For a container node it first
    transforms all children concurrently, then builds a copy of the node whose
    children are the concatenation of the per-child results in their original
    order, and finally hands that copy to :meth:`transform_node`. Leaf nodes go
    straight to :meth:`transform_node`.

    Subclasses override :meth:`transform_node` to return the replacement list
    for a node: ``[node]`` keeps it, ``[]`` removes it, and several nodes are
    spliced into the parent in place of the original. Nodes are never mutated;
    every rebuilt container is a new object.

    If transforming any child raises, the still-running sibling branches are
    cancelled and the exception propagates out of ``transform``.

    """

    transform_name: str = "transform"

    async def transform(self, node: Node) -> list[Node]:
        """Transform ``node`` and its subtree.

        Parameters
        ----------
        node : Node
            Root of the subtree to transform

        Returns
        -------
        list of Node
            Nodes that take the place of ``node`` in its parent

        Raises
        ------
        ValueError
            If a replacement is not allowed in its parent's child position
            (for example a non-ListItem spliced into a List)

        """
        children = get_node_children(node)
        if children:
            replaced = await self._transform_children(children)
            node = replace_node_children(node, replaced)
        return await self.transform_node(node)

    async def _transform_children(self, children: list[Node]) -> list[Node]:
        # All branches start before any is awaited; results are joined by position
        tasks = [asyncio.ensure_future(self.transform(child)) for child in children]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        return [replacement for result in results for replacement in result]

    async def transform_node(self, node: Node) -> list[Node]:
        """Return the replacement list for a node whose children are already transformed.

        The default keeps the node unchanged.

        Parameters
        ----------
        node : Node
            Node to transform

        Returns
        -------
        list of Node
            Replacement nodes, in order

        """
        return [node]

    async def transform_document(self, document: Document) -> Document:
        """Transform a whole document.

        Parameters
        ----------
        document : Document
            Root of the tree

        Returns
        -------
        Document
            New document with all transformations applied

        Raises
        ------
        TransformError
            If ``document`` is not a Document, or if the root does not come
            back as exactly one Document

        """
        if not isinstance(document, Document):
            raise TransformError(
                f"Expected a Document as the root node, got {type(document).__name__}",
                transform_name=self.transform_name,
            )

        result = await self.transform(document)
        if len(result) != 1 or not isinstance(result[0], Document):
            raise TransformError(
                f"Transforming the root must yield exactly one Document, got {len(result)} node(s)",
                transform_name=self.transform_name,
            )

        return result[0]


def iter_nodes(node: Node) -> Iterator[Node]:
    """Iterate over ``node`` and all of its descendants in document order.

    Parameters
    ----------
    node : Node
        Root of the subtree

    Yields
    ------
    Node
        Each node, parents before their children

    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(get_node_children(current)))


def extract_nodes(doc: Node, node_type: Type[Node] | None = None) -> list[Node]:
    """Extract all nodes of a specific type from a tree.

    Parameters
    ----------
    doc : Node
        Tree to search
    node_type : type or None, default = None
        Node type to extract (None for all nodes)

    Returns
    -------
    list of Node
        All matching nodes in document order

    Examples
    --------
    >>> code_blocks = extract_nodes(doc, CodeBlock)

    """
    predicate: Callable[[Node], bool] = (lambda n: isinstance(n, node_type)) if node_type else (lambda n: True)
    return [n for n in iter_nodes(doc) if predicate(n)]
