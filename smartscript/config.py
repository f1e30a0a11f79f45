"""
Loader for smartscript.yaml.

The configuration only affects the command-line tester; the lexer and parser
have no tunable behaviour.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

CONFIG_FILE = "smartscript.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_yaml = YAML(typ="safe")


@dataclass(frozen=True)
class SmartScriptConfig:
    """Settings of the command-line tester."""
    encoding: str = "utf-8"          # encoding of documents read from disk
    log_level: str = "WARNING"
    show_original: bool = True       # `show` prints the source before the rebuilt text

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SmartScriptConfig":
        """Creates an instance from a mapping (from YAML), validating every key."""
        unknown = sorted(str(key) for key in set(data) - {"encoding", "log_level", "show_original"})
        if unknown:
            raise ConfigError(f"{CONFIG_FILE}: unknown key(s): {', '.join(unknown)}")

        encoding = data.get("encoding", cls.encoding)
        if not isinstance(encoding, str):
            raise ConfigError(f"{CONFIG_FILE}: encoding must be a string, got {encoding!r}")
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ConfigError(f"{CONFIG_FILE}: unknown encoding {encoding!r}") from e

        log_level = str(data.get("log_level", cls.log_level)).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"{CONFIG_FILE}: log_level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        show_original = data.get("show_original", cls.show_original)
        if not isinstance(show_original, bool):
            raise ConfigError(f"{CONFIG_FILE}: show_original must be true or false, got {show_original!r}")

        return cls(encoding=encoding, log_level=log_level, show_original=show_original)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


DEFAULT_CONFIG = SmartScriptConfig()


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file that must contain a mapping (an empty file is an empty mapping)."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def load_config(path: Optional[Path] = None, *, cwd: Optional[Path] = None) -> SmartScriptConfig:
    """
    Loads the tester configuration.

    Args:
        path: Explicit config file; must exist
        cwd: Directory searched for smartscript.yaml when no path is given

    Returns:
        Loaded configuration or DEFAULT_CONFIG when no file is found

    Raises:
        ConfigError: If the file is missing (explicit path) or invalid
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return SmartScriptConfig.from_dict(_read_yaml_map(path))

    candidate = (cwd or Path.cwd()) / CONFIG_FILE
    if not candidate.is_file():
        return DEFAULT_CONFIG
    return SmartScriptConfig.from_dict(_read_yaml_map(candidate))


__all__ = ["SmartScriptConfig", "DEFAULT_CONFIG", "CONFIG_FILE", "load_config"]
