"""
Error hierarchy shared by the template front end and the command-line tester.

The CLI prints a SmartScriptUserError as a one-line message and exits with
status 2; any other exception is a bug and keeps its traceback.
"""

from __future__ import annotations


class SmartScriptUserError(Exception):
    """
    Problem in user input: a malformed document, a bad smartscript.yaml
    or a document file that cannot be read.
    """
    pass


class ConfigError(SmartScriptUserError):
    """Invalid smartscript.yaml: wrong root type, unknown key or bad value."""
    pass


__all__ = ["SmartScriptUserError", "ConfigError"]
