"""
Lexical analyzer for SmartScript templates.

Splits document text into tokens. Unlike a context-tracking lexer, the
tokenisation rules are chosen by an explicit mode that the parser sets
before every call, because tag names and tag bodies follow structurally
different grammars.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Iterator, List, Optional

from .tokens import LexError, LexerMode, Token, TokenType

logger = logging.getLogger(__name__)


class SmartScriptLexer:
    """
    Mode-driven lexer over an immutable text buffer.

    Tokens are produced lazily, one per next_token() call:
    - TEXT: plain text with \\\\ and \\{ escapes, up to the next unescaped {$
    - TAG_NAME: a single name or '='
    - TAG_BODY: variables, numbers, strings, functions, operators and $}
    """

    TAG_OPEN = "{$"
    TAG_CLOSE = "$}"
    OPERATORS = "+-*/^"
    DIGITS = "0123456789"
    WHITESPACE = " \t\r\n"

    INT_MIN = -(2 ** 63)
    INT_MAX = 2 ** 63 - 1

    # tag names are ASCII; variable and function names may use any letters
    _TAG_NAME = re.compile(r'[A-Za-z][A-Za-z0-9_]*')
    _NAME = re.compile(r'[^\W\d_]\w*')
    _DIGITS = re.compile(r'[0-9]+')
    _INTEGER_PART = re.compile(r'-?[0-9]+')

    # Escapes recognised inside string literals
    _STRING_ESCAPES = {
        '"': '"',
        '\\': '\\',
        'n': '\n',
        't': '\t',
        'r': '\r',
    }

    # Escapes recognised in plain text
    _TEXT_ESCAPES = {
        '\\': '\\',
        '{': '{',
    }

    def __init__(self, text: str, mode: LexerMode = LexerMode.TEXT):
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        self.text = text
        self.length = len(text)
        self.position = 0
        self.line = 1
        self.column = 1

        self._mode = LexerMode.TEXT
        self.set_mode(mode)
        self._token: Optional[Token] = None

    # -------------------- Public API --------------------

    @property
    def mode(self) -> LexerMode:
        return self._mode

    def set_mode(self, mode: LexerMode) -> None:
        """
        Changes tokenisation rules starting from the next next_token() call.

        Raises:
            TypeError: If mode is not a LexerMode
        """
        if not isinstance(mode, LexerMode):
            raise TypeError(f"mode must be LexerMode, got {mode!r}")
        if mode is not self._mode:
            logger.debug(f"Lexer mode {self._mode.name} -> {mode.name} at {self.line}:{self.column}")
        self._mode = mode

    def current_token(self) -> Token:
        """
        Returns the last produced token without advancing.

        Raises:
            LexError: If next_token() has not been called yet
        """
        if self._token is None:
            raise LexError(
                "Cannot get token before extracting one with next_token()",
                self.position, self.line, self.column
            )
        return self._token

    def next_token(self) -> Token:
        """
        Extracts the next token using the rules of the current mode.

        Returns:
            Extracted token; EOF once the input is exhausted

        Raises:
            LexError: On malformed input or when called again after EOF
        """
        if self._token is not None and self._token.type == TokenType.EOF:
            raise LexError("Cannot get next token after EOF", self.position, self.line, self.column)

        if self._mode is LexerMode.TEXT:
            token = self._lex_text()
        elif self._mode is LexerMode.TAG_NAME:
            token = self._lex_tag_name()
        else:
            token = self._lex_tag_body()

        self._token = token
        return token

    def tokens(self) -> Iterator[Token]:
        """
        Lazily yields tokens in the current mode up to and including EOF.

        The mode may still be switched between iterations.
        """
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    # -------------------- TEXT --------------------

    def _lex_text(self) -> Token:
        if self._at_end():
            return self._eof()

        start = self._mark()
        if self._at(self.TAG_OPEN):
            self._advance(len(self.TAG_OPEN))
            return self._make(TokenType.OPEN_TAG, self.TAG_OPEN, start)

        chunks: List[str] = []
        while not self._at_end():
            char = self.text[self.position]
            if char == '\\':
                chunks.append(self._read_escape(self._TEXT_ESCAPES, "outside of a tag"))
            elif self._at(self.TAG_OPEN):
                break
            else:
                chunks.append(char)
                self._advance(1)

        return self._make(TokenType.PLAIN_TEXT, "".join(chunks), start)

    # -------------------- TAG_NAME --------------------

    def _lex_tag_name(self) -> Token:
        self._skip_whitespace()
        if self._at_end():
            return self._eof()

        start = self._mark()
        if self._at("="):
            self._advance(1)
            return self._make(TokenType.TAG_NAME, "=", start)

        name = self._read_name(self._TAG_NAME, "Invalid tag name start")
        return self._make(TokenType.TAG_NAME, name, start)

    # -------------------- TAG_BODY --------------------

    def _lex_tag_body(self) -> Token:
        self._skip_whitespace()
        if self._at_end():
            return self._eof()

        start = self._mark()
        char = self.text[self.position]

        if self._at(self.TAG_CLOSE):
            self._advance(len(self.TAG_CLOSE))
            return self._make(TokenType.CLOSE_TAG, self.TAG_CLOSE, start)

        if char == '@':
            self._advance(1)
            name = self._read_name(self._NAME, "Invalid function name start")
            return self._make(TokenType.FUNCTION, name, start)

        if char == '"':
            return self._make(TokenType.STRING, self._read_string(), start)

        if char in self.DIGITS or (char == '-' and self._next_is_digit()):
            return self._read_number(start)

        if self._NAME.match(self.text, self.position):
            name = self._read_name(self._NAME, "Invalid variable name start")
            return self._make(TokenType.VARIABLE, name, start)

        if char in self.OPERATORS:
            self._advance(1)
            return self._make(TokenType.OPERATOR, char, start)

        raise self._error(f"Unrecognized character {char!r}")

    def _read_name(self, pattern: re.Pattern, failure: str) -> str:
        match = pattern.match(self.text, self.position)
        if match is None:
            found = self.text[self.position] if not self._at_end() else "end of input"
            raise self._error(f"{failure}: {found!r}")
        value = match.group(0)
        self._advance(len(value))
        return value

    def _read_string(self) -> str:
        opening = self._mark()
        self._advance(1)  # "
        chunks: List[str] = []
        while not self._at_end():
            char = self.text[self.position]
            if char == '\\':
                chunks.append(self._read_escape(self._STRING_ESCAPES, "inside a string"))
            elif char == '"':
                self._advance(1)
                return "".join(chunks)
            else:
                chunks.append(char)
                self._advance(1)
        raise LexError("String was never terminated", *opening)

    def _read_number(self, start) -> Token:
        integer_part = self._INTEGER_PART.match(self.text, self.position)
        # dispatch guarantees at least one digit
        end = integer_part.end()

        if end < self.length and self.text[end] == '.':
            fraction = self._DIGITS.match(self.text, end + 1)
            if fraction is None:
                self._advance(end + 1 - self.position)
                raise self._error("Double value cannot end with a decimal point")
            literal = self.text[self.position:fraction.end()]
            value = float(literal)
            if not math.isfinite(value):
                raise self._error(f"Double value out of range: {literal}")
            self._advance(len(literal))
            return self._make(TokenType.DOUBLE, value, start)

        literal = integer_part.group(0)
        # int64 has at most 19 digits; longer literals never reach int()
        if len(literal.lstrip('-')) > 19 or not self.INT_MIN <= int(literal) <= self.INT_MAX:
            raise self._error(f"Integer value out of range: {literal}")
        value = int(literal)
        self._advance(len(literal))
        return self._make(TokenType.INTEGER, value, start)

    # -------------------- Helpers --------------------

    def _read_escape(self, escapes: dict, where: str) -> str:
        """Consumes a backslash escape and returns the character it stands for."""
        if self.position + 1 >= self.length:
            raise self._error("Started escape sequence did not end")
        escaped = self.text[self.position + 1]
        if escaped not in escapes:
            raise self._error(f"Cannot escape character {escaped!r} {where}")
        self._advance(2)
        return escapes[escaped]

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self.text[self.position] in self.WHITESPACE:
            self._advance(1)

    def _next_is_digit(self) -> bool:
        nxt = self.position + 1
        return nxt < self.length and self.text[nxt] in self.DIGITS

    def _at(self, sequence: str) -> bool:
        return self.text.startswith(sequence, self.position)

    def _at_end(self) -> bool:
        return self.position >= self.length

    def _mark(self):
        return self.position, self.line, self.column

    def _make(self, token_type: TokenType, value, start) -> Token:
        position, line, column = start
        token = Token(token_type, value, position, line, column)
        logger.debug(f"Lexed {token!r} in mode {self._mode.name}")
        return token

    def _eof(self) -> Token:
        return Token(TokenType.EOF, None, self.position, self.line, self.column)

    def _error(self, message: str) -> LexError:
        return LexError(message, self.position, self.line, self.column)

    def _advance(self, count: int) -> None:
        """
        Moves the cursor forward, keeping line and column numbers in sync.
        """
        for _ in range(count):
            if self.position >= self.length:
                break
            if self.text[self.position] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.position += 1


def tokenize(text: str, mode: LexerMode = LexerMode.TEXT) -> List[Token]:
    """
    Convenience function: tokenizes text in a single mode.

    Args:
        text: Source text
        mode: Mode applied to the whole text

    Returns:
        List of tokens ending with EOF

    Raises:
        LexError: On malformed input
    """
    return list(SmartScriptLexer(text, mode).tokens())


__all__ = ["SmartScriptLexer", "tokenize"]
