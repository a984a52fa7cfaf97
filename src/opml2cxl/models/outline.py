"""Outline tree models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OutlineNode(BaseModel):
    """One entry of a hierarchical outline: display text plus ordered children."""

    text: str = ""
    children: list["OutlineNode"] = Field(default_factory=list)


class OutlineDocument(BaseModel):
    """A parsed outline.

    The document's implicit root is not materialized; `nodes` holds its children, the top-level
    outlines.
    """

    title: str | None = None
    nodes: list[OutlineNode] = Field(default_factory=list)

    def count(self) -> int:
        """Return the total number of nodes in the forest."""

        n = 0
        stack = list(self.nodes)
        while stack:
            node = stack.pop()
            n += 1
            stack.extend(node.children)
        return n

    def depth(self) -> int:
        """Return the depth of the deepest node (0 for an empty forest)."""

        deepest = 0
        stack = [(node, 1) for node in self.nodes]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.children)
        return deepest
