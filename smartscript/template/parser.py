"""
Parser for SmartScript templates.

Drives SmartScriptLexer through its modes and builds an immutable document
tree. Supported tags:

document → (TEXT | tag)*
tag      → "{$" tagbody "$}"
tagbody  → "=" element*
         | "FOR" VARIABLE element element element?
         | "END"
element  → VARIABLE | INTEGER | DOUBLE | STRING | OPERATOR | FUNCTION
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .elements import (
    LOOP_EXPRESSION_TYPES,
    AnyElement,
    ConstantDouble,
    ConstantInteger,
    Function,
    Operator,
    StringLiteral,
    Variable,
)
from .lexer import SmartScriptLexer
from .nodes import DocumentNode, EchoNode, ForLoopNode, Node, TextNode, iter_nodes
from .tokens import LexError, LexerMode, ParseError, Token, TokenType

logger = logging.getLogger(__name__)


@dataclass
class _OpenBlock:
    """A block whose END has not been seen yet, with the children collected so far."""
    opening: Optional[Token]                      # None for the document root
    header: Tuple[AnyElement, ...] = ()
    children: List[Node] = field(default_factory=list)


class SmartScriptParser:
    """
    Single-pass parser with an explicit stack of open blocks.

    The whole document is parsed in the constructor; on success the tree is
    available as `document`, otherwise the first error is raised and no tree
    is produced.
    """

    ECHO_TAG = "="
    FOR_TAG = "FOR"
    END_TAG = "END"

    FOR_MIN_ARGUMENTS = 3
    FOR_MAX_ARGUMENTS = 4

    _ELEMENT_FACTORIES: Dict[TokenType, Callable[..., AnyElement]] = {
        TokenType.VARIABLE: Variable,
        TokenType.FUNCTION: Function,
        TokenType.STRING: StringLiteral,
        TokenType.INTEGER: ConstantInteger,
        TokenType.DOUBLE: ConstantDouble,
        TokenType.OPERATOR: Operator,
    }

    def __init__(self, document_body: str):
        """
        Parses the document.

        Args:
            document_body: Full template text

        Raises:
            TypeError: If document_body is not a str
            ParseError: On malformed characters or grammar violations;
                a lexer failure is chained as __cause__
        """
        if not isinstance(document_body, str):
            raise TypeError(f"document_body must be str, got {type(document_body).__name__}")
        self.lexer = SmartScriptLexer(document_body)
        self._stack: List[_OpenBlock] = []
        try:
            self.document: DocumentNode = self._parse_document()
        except LexError as e:
            raise ParseError.from_lex_error(e) from e

    # -------------------- Document --------------------

    def _parse_document(self) -> DocumentNode:
        root = _OpenBlock(opening=None)
        self._stack = [root]

        while True:
            self.lexer.set_mode(LexerMode.TEXT)
            token = self.lexer.next_token()

            if token.type == TokenType.EOF:
                break
            if token.type == TokenType.PLAIN_TEXT:
                self._top().children.append(TextNode(token.value))
            elif token.type == TokenType.OPEN_TAG:
                self._parse_tag(token)
            else:
                raise ParseError(f"Unexpected token in document text: {token.type.name}", token)

        if len(self._stack) > 1:
            unclosed = self._stack[-1]
            raise ParseError("Missing END tag for FOR", unclosed.opening)

        document = DocumentNode(children=root.children)
        logger.debug(
            f"Parsed document: {len(document.children)} top-level nodes, "
            f"{sum(1 for _ in iter_nodes(document)) - 1} nodes total"
        )
        return document

    # -------------------- Tags --------------------

    def _parse_tag(self, open_token: Token) -> None:
        """
        Parses one tag after its opening {$ has been consumed.
        """
        self.lexer.set_mode(LexerMode.TAG_NAME)
        name_token = self.lexer.next_token()
        if name_token.type == TokenType.EOF:
            raise ParseError("Tag was never closed", open_token)
        if name_token.type != TokenType.TAG_NAME:
            raise ParseError(f"Expected tag name, got {name_token.type.name}", name_token)

        name = name_token.value
        self.lexer.set_mode(LexerMode.TAG_BODY)
        logger.debug(f"Parsing tag '{name}' at {name_token.line}:{name_token.column}")

        if name == self.ECHO_TAG:
            elements = self._parse_tag_body(open_token)
            self._top().children.append(EchoNode(elements=elements))
        elif name == self.FOR_TAG:
            self._open_for_loop(name_token, self._parse_tag_body(open_token))
        elif name == self.END_TAG:
            self._close_for_loop(name_token, self._parse_tag_body(open_token))
        else:
            raise ParseError(f"Unknown tag '{name}'", name_token)

    def _parse_tag_body(self, open_token: Token) -> List[AnyElement]:
        """Collects elements up to and including the closing $}."""
        elements: List[AnyElement] = []
        while True:
            token = self.lexer.next_token()
            if token.type == TokenType.CLOSE_TAG:
                return elements
            if token.type == TokenType.EOF:
                raise ParseError("Tag was never closed", open_token)
            elements.append(self._to_element(token))

    def _to_element(self, token: Token) -> AnyElement:
        factory = self._ELEMENT_FACTORIES.get(token.type)
        if factory is None:
            raise ParseError(f"Unexpected token inside tag: {token.type.name}", token)
        return factory(token.value)

    def _open_for_loop(self, name_token: Token, arguments: List[AnyElement]) -> None:
        count = len(arguments)
        if count < self.FOR_MIN_ARGUMENTS:
            raise ParseError(
                f"Too few arguments in FOR tag: expected {self.FOR_MIN_ARGUMENTS} or "
                f"{self.FOR_MAX_ARGUMENTS}, got {count}",
                name_token
            )
        if count > self.FOR_MAX_ARGUMENTS:
            raise ParseError(
                f"Too many arguments in FOR tag: expected {self.FOR_MIN_ARGUMENTS} or "
                f"{self.FOR_MAX_ARGUMENTS}, got {count}",
                name_token
            )

        variable, *expressions = arguments
        if not isinstance(variable, Variable):
            raise ParseError(f"FOR loop variable must be a variable, got '{variable.as_text()}'", name_token)
        for expression in expressions:
            if not isinstance(expression, LOOP_EXPRESSION_TYPES):
                raise ParseError(f"Invalid FOR loop expression '{expression.as_text()}'", name_token)

        self._stack.append(_OpenBlock(opening=name_token, header=tuple(arguments)))
        logger.debug(f"Opened FOR block, depth {len(self._stack) - 1}")

    def _close_for_loop(self, name_token: Token, arguments: List[AnyElement]) -> None:
        if arguments:
            raise ParseError("END tag cannot have arguments", name_token)
        if len(self._stack) == 1:
            raise ParseError("Too many END tags", name_token)

        block = self._stack.pop()
        loop = ForLoopNode(*block.header, children=block.children)
        self._top().children.append(loop)
        logger.debug(f"Closed FOR block with {len(loop.children)} children, depth {len(self._stack) - 1}")

    # -------------------- Helpers --------------------

    def _top(self) -> _OpenBlock:
        return self._stack[-1]


def parse(document_body: str) -> DocumentNode:
    """
    Convenience function: parses a template into its document tree.

    Raises:
        ParseError: On malformed characters or grammar violations
    """
    return SmartScriptParser(document_body).document


__all__ = ["SmartScriptParser", "parse"]
