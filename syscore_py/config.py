"""
Configuration file support for Syscore.

Loads settings from ``~/.config/syscore/config.yaml`` (or
``$XDG_CONFIG_HOME/syscore/config.yaml``) and exposes them as a typed
dataclass that the CLI and the aggregator factory read.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from syscore_py.inventory.rules import FilterRule
from syscore_py.shell import DEFAULT_TIMEOUT
from syscore_py.sources.portable import PORTABLE_DEPTH
from syscore_py.sources.start_menu import START_MENU_DEPTH

logger = logging.getLogger("syscore.config")


def default_config_path() -> Path:
    """Return the default configuration file path.

    Uses ``$XDG_CONFIG_HOME/syscore/config.yaml`` when set, otherwise
    falls back to ``~/.config/syscore/config.yaml``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "syscore" / "config.yaml"
    return Path.home() / ".config" / "syscore" / "config.yaml"


def _positive_int(data: Dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        logger.warning("Ignoring invalid %s: %r", key, value)
        return default
    return value


@dataclass
class SyscoreConfig:
    """Top-level configuration loaded from the YAML file."""

    script_path: Optional[Path] = None
    powershell: str = "powershell"
    process_timeout: float = DEFAULT_TIMEOUT
    start_menu_depth: int = START_MENU_DEPTH
    portable_depth: int = PORTABLE_DEPTH
    portable_roots: List[Path] = field(default_factory=list)
    describe_executables: bool = True
    rules: List[FilterRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyscoreConfig":
        """Construct a ``SyscoreConfig`` from a parsed YAML dictionary."""
        if not isinstance(data, dict):
            return cls()

        rules: List[FilterRule] = []
        for entry in data.get("rules") or []:
            if not isinstance(entry, dict):
                logger.warning("Skipping invalid rules entry: %s", entry)
                continue
            try:
                rules.append(FilterRule.from_dict(entry))
            except ValueError as e:
                logger.warning("Skipping invalid rules entry %s: %s", entry, e)

        timeout = data.get("process_timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            logger.warning("Ignoring invalid process_timeout: %r", timeout)
            timeout = DEFAULT_TIMEOUT

        script_path = data.get("script_path")

        return cls(
            script_path=Path(script_path).expanduser() if script_path else None,
            powershell=str(data.get("powershell") or "powershell"),
            process_timeout=float(timeout),
            start_menu_depth=_positive_int(data, "start_menu_depth", START_MENU_DEPTH),
            portable_depth=_positive_int(data, "portable_depth", PORTABLE_DEPTH),
            portable_roots=[
                Path(p).expanduser() for p in data.get("portable_roots") or [] if p
            ],
            describe_executables=bool(data.get("describe_executables", True)),
            rules=rules,
        )

    @classmethod
    def from_file(cls, path: Path) -> "SyscoreConfig":
        """Read a YAML file and return a ``SyscoreConfig``.

        Returns a default config on any error.
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f.read())
            if data is None:
                return cls()
            return cls.from_dict(data)
        except (IOError, yaml.YAMLError) as e:
            logger.error("Failed to load config from %s: %s", path, e)
            return cls()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SyscoreConfig":
        """Main entry point - load config from *config_path* or the default location.

        Returns a default config if the file does not exist.
        """
        path = config_path or default_config_path()
        if not path.exists():
            return cls()
        return cls.from_file(path)
