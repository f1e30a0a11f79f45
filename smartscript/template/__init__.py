"""
SmartScript template front end: lexer, parser, document tree and reconstructor.
"""

from __future__ import annotations

from .elements import (
    AnyElement,
    ConstantDouble,
    ConstantInteger,
    Element,
    Function,
    Operator,
    StringLiteral,
    Variable,
)
from .lexer import SmartScriptLexer, tokenize
from .nodes import AnyNode, DocumentNode, EchoNode, ForLoopNode, Node, TextNode, iter_nodes
from .parser import SmartScriptParser, parse
from .reconstructor import render
from .tokens import LexError, LexerMode, ParseError, Token, TokenType

__all__ = [
    # Lexing
    "SmartScriptLexer",
    "tokenize",
    "Token",
    "TokenType",
    "LexerMode",
    "LexError",
    # Parsing
    "SmartScriptParser",
    "parse",
    "ParseError",
    # Elements
    "Element",
    "AnyElement",
    "ConstantInteger",
    "ConstantDouble",
    "Variable",
    "Function",
    "Operator",
    "StringLiteral",
    # Nodes
    "Node",
    "AnyNode",
    "DocumentNode",
    "TextNode",
    "EchoNode",
    "ForLoopNode",
    "iter_nodes",
    # Reconstruction
    "render",
]
