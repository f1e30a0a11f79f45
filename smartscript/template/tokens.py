"""
Lexical types for the SmartScript template language.

Defines token kinds, lexer modes, the token value object and the two
syntax error kinds raised by the lexer and the parser.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors import SmartScriptUserError

# Absolute tolerance used when comparing double values
DOUBLE_TOLERANCE = 1e-5

TokenValue = Union[str, int, float, None]


class TokenType(enum.Enum):
    """Token kinds produced by SmartScriptLexer."""

    EOF = "EOF"

    # TEXT mode
    PLAIN_TEXT = "PLAIN_TEXT"
    OPEN_TAG = "OPEN_TAG"                    # {$

    # TAG_NAME mode
    TAG_NAME = "TAG_NAME"                    # identifier or =

    # TAG_BODY mode
    CLOSE_TAG = "CLOSE_TAG"                  # $}
    VARIABLE = "VARIABLE"
    FUNCTION = "FUNCTION"                    # @name
    STRING = "STRING"
    INTEGER = "INTEGER"
    DOUBLE = "DOUBLE"
    OPERATOR = "OPERATOR"                    # + - * / ^


class LexerMode(enum.Enum):
    """
    Tokenisation rules the lexer applies.

    The mode is always switched by the caller (the parser), never by the lexer.
    """

    TEXT = "TEXT"            # document body, only an unescaped {$ is special
    TAG_NAME = "TAG_NAME"    # exactly one identifier or '='
    TAG_BODY = "TAG_BODY"    # elements up to the closing $}


@dataclass(frozen=True)
class Token:
    """
    Immutable token with positional information for error diagnostics.

    Equality compares only kind and value; doubles within DOUBLE_TOLERANCE
    are considered equal.
    """
    type: TokenType
    value: TokenValue
    position: int = field(default=0, compare=False)   # offset in source text
    line: int = field(default=1, compare=False)       # 1-based
    column: int = field(default=1, compare=False)     # 1-based

    def __eq__(self, other) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        if self.type != other.type:
            return False
        if self.type == TokenType.DOUBLE:
            return math.isclose(self.value, other.value, rel_tol=0.0, abs_tol=DOUBLE_TOLERANCE)
        return self.value == other.value

    def __hash__(self) -> int:
        if self.type == TokenType.DOUBLE:
            return hash(self.type)
        return hash((self.type, self.value))

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class LexError(SmartScriptUserError):
    """Malformed character stream."""

    def __init__(self, message: str, position: int = 0, line: int = 1, column: int = 1):
        super().__init__(f"{message} at {line}:{column}")
        self.reason = message
        self.position = position
        self.line = line
        self.column = column


class ParseError(SmartScriptUserError):
    """Document cannot be parsed: a grammar violation or a wrapped lexer failure."""

    def __init__(
            self,
            message: str,
            token: Optional[Token] = None,
            *,
            line: Optional[int] = None,
            column: Optional[int] = None
    ):
        if token is not None:
            line, column = token.line, token.column
            super().__init__(f"{message} at {line}:{column} (token: {token.type.name} {token.value!r})")
        elif line is not None:
            super().__init__(f"{message} at {line}:{column}")
        else:
            super().__init__(message)
        self.reason = message
        self.token = token
        self.line = line
        self.column = column

    @classmethod
    def from_lex_error(cls, error: LexError) -> "ParseError":
        """Wraps a lexer failure, keeping its reason and position."""
        return cls(error.reason, line=error.line, column=error.column)


__all__ = [
    "DOUBLE_TOLERANCE",
    "TokenType",
    "LexerMode",
    "Token",
    "TokenValue",
    "LexError",
    "ParseError",
]
