"""
Shared test infrastructure for SmartScript.

Modules:
- file_utils: Writing documents and config files
- cli_utils: Running the command-line tester in a subprocess
"""

from .file_utils import write, write_config
from .cli_utils import run_cli, jload

__all__ = [
    # File utilities
    "write", "write_config",

    # CLI utilities
    "run_cli", "jload",
]
