"""
SmartScript — parser and reconstructor for {$ ... $} templates.
"""

from __future__ import annotations

from .errors import SmartScriptUserError
from .template import DocumentNode, LexError, ParseError, parse, render

__all__ = ["SmartScriptUserError", "LexError", "ParseError", "DocumentNode", "parse", "render"]
