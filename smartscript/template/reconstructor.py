"""
Reconstructs template source text from a document tree.

The output is not byte-identical to the original document (whitespace inside
tags is normalised), but parsing it again yields an equal tree.
"""

from __future__ import annotations

from .nodes import DocumentNode, EchoNode, ForLoopNode, Node, TextNode

ECHO_OPEN = "{$= "
FOR_OPEN = "{$ FOR "
ECHO_CLOSE = "$}"
FOR_CLOSE = " $}"
END_TAG = "{$END$}"


def render(node: Node) -> str:
    """
    Renders a node and its subtree back to template text.

    Args:
        node: Any node of a well-formed tree

    Returns:
        Template text
    """
    parts: list[str] = []
    _render_into(node, parts)
    return "".join(parts)


def _render_into(node: Node, parts: list[str]) -> None:
    if isinstance(node, TextNode):
        parts.append(escape_text(node.text))
    elif isinstance(node, EchoNode):
        parts.append(ECHO_OPEN)
        parts.extend(element.as_text() + " " for element in node.elements)
        parts.append(ECHO_CLOSE)
    elif isinstance(node, ForLoopNode):
        parts.append(FOR_OPEN)
        parts.append(" ".join(element.as_text() for element in node.expressions))
        parts.append(FOR_CLOSE)
        for child in node.children:
            _render_into(child, parts)
        parts.append(END_TAG)
    elif isinstance(node, DocumentNode):
        for child in node.children:
            _render_into(child, parts)
    else:
        raise TypeError(f"Cannot render node of type {type(node).__name__}")


def escape_text(text: str) -> str:
    """
    Escapes plain text so the lexer reads it back unchanged.

    Only backslashes and tag openings need escaping; any other text is
    returned as is.
    """
    return text.replace("\\", "\\\\").replace("{$", "\\{$")


__all__ = ["render", "escape_text"]
