"""
Document tree nodes.

An immutable hierarchy of node classes representing a parsed template.
The parser builds nodes bottom-up: a block's children are collected first
and the node is created once the block is closed, so a finished tree
is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from .elements import LOOP_EXPRESSION_TYPES, AnyElement, Element, Variable


@dataclass(frozen=True)
class Node:
    """
    Base class for all document tree nodes.

    Every node has an ordered tuple of children; leaf nodes keep it empty.
    """
    children: Tuple["Node", ...] = field(default=(), kw_only=True)

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))
        for child in self.children:
            if not isinstance(child, Node):
                raise TypeError(f"Child of {type(self).__name__} must be a Node, got {type(child).__name__}")
            if isinstance(child, DocumentNode):
                raise ValueError("DocumentNode can only be the root of a tree")

    def _require_no_children(self) -> None:
        if self.children:
            raise ValueError(f"{type(self).__name__} cannot have children")


@dataclass(frozen=True)
class DocumentNode(Node):
    """Root of a parsed document."""
    pass


@dataclass(frozen=True)
class TextNode(Node):
    """
    Plain document text between tags.

    Holds the text with escapes already resolved.
    """
    text: str

    def __post_init__(self):
        super().__post_init__()
        self._require_no_children()


@dataclass(frozen=True)
class EchoNode(Node):
    """
    Output tag {$= ... $}.

    Holds the tag body as an ordered sequence of elements.
    """
    elements: Tuple[AnyElement, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        self._require_no_children()
        object.__setattr__(self, "elements", tuple(self.elements))
        for element in self.elements:
            if not isinstance(element, Element):
                raise TypeError(f"Echo element must be an Element, got {type(element).__name__}")


@dataclass(frozen=True)
class ForLoopNode(Node):
    """
    Loop block {$ FOR variable start end [step] $} ... {$END$}.

    Children form the loop body.
    """
    variable: Variable
    start: AnyElement
    end: AnyElement
    step: Optional[AnyElement] = None

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.variable, Variable):
            raise TypeError(f"FOR loop variable must be a Variable, got {type(self.variable).__name__}")
        for name in ("start", "end", "step"):
            value = getattr(self, name)
            if value is None and name == "step":
                continue
            if not isinstance(value, LOOP_EXPRESSION_TYPES):
                raise TypeError(f"FOR loop {name} cannot be {type(value).__name__}")

    @property
    def expressions(self) -> Tuple[AnyElement, ...]:
        """Header elements in source order, without the missing step."""
        header = (self.variable, self.start, self.end)
        return header if self.step is None else header + (self.step,)


# Closed set of all node variants
AnyNode = Union[DocumentNode, TextNode, EchoNode, ForLoopNode]


def iter_nodes(node: Node) -> Iterator[Node]:
    """Walks the tree depth-first, parents before children."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


__all__ = [
    "Node",
    "DocumentNode",
    "TextNode",
    "EchoNode",
    "ForLoopNode",
    "AnyNode",
    "iter_nodes",
]
