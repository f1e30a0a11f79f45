"""
Tag-body elements.

Atomic values that appear inside echo and FOR tags. Each element knows its
canonical template form (as_text), which the reconstructor emits verbatim.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from .tokens import DOUBLE_TOLERANCE


@dataclass(frozen=True)
class Element(ABC):
    """Base class for all tag-body elements."""

    @abstractmethod
    def as_text(self) -> str:
        """Returns the element as it is written inside a tag."""
        pass

    def __str__(self) -> str:
        return self.as_text()


@dataclass(frozen=True)
class ConstantInteger(Element):
    """Integer literal: 42, -1"""
    value: int

    def as_text(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class ConstantDouble(Element):
    """
    Double literal: 3.14, -1.35

    Two doubles are equal when they differ by at most DOUBLE_TOLERANCE.
    """
    value: float

    def as_text(self) -> str:
        return _format_double(self.value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConstantDouble):
            return NotImplemented
        return math.isclose(self.value, other.value, rel_tol=0.0, abs_tol=DOUBLE_TOLERANCE)

    def __hash__(self) -> int:
        # tolerance-based equality is not transitive, so all doubles share a bucket
        return hash(ConstantDouble)


@dataclass(frozen=True)
class Variable(Element):
    """Variable reference: i, last_year"""
    name: str

    def as_text(self) -> str:
        return self.name


@dataclass(frozen=True)
class Function(Element):
    """Function reference: @sin"""
    name: str

    def as_text(self) -> str:
        return f"@{self.name}"


@dataclass(frozen=True)
class Operator(Element):
    """Arithmetic operator: + - * / ^"""
    symbol: str

    def as_text(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class StringLiteral(Element):
    """
    String literal.

    value holds the decoded text; as_text() quotes it and escapes
    backslashes and double quotes.
    """
    value: str

    def as_text(self) -> str:
        escaped = self.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'


def _format_double(value: float) -> str:
    """
    Formats a double in positional notation with at least one fractional digit,
    so that the lexer reads it back as a double.
    """
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = f"{value:.17f}".rstrip('0')
    if '.' not in text:
        text += '.0'
    elif text.endswith('.'):
        text += '0'
    return text


# Closed set of all element variants
AnyElement = Union[
    ConstantInteger,
    ConstantDouble,
    Variable,
    Function,
    Operator,
    StringLiteral,
]

# Elements allowed as FOR loop bounds and step
LOOP_EXPRESSION_TYPES = (Variable, ConstantInteger, ConstantDouble, StringLiteral)


__all__ = [
    "Element",
    "ConstantInteger",
    "ConstantDouble",
    "Variable",
    "Function",
    "Operator",
    "StringLiteral",
    "AnyElement",
    "LOOP_EXPRESSION_TYPES",
]
