"""
Tests for the config module.
"""

import os
from pathlib import Path
from unittest.mock import patch

from syscore_py.config import SyscoreConfig, default_config_path
from syscore_py.inventory.rules import RuleAction, RuleField, RuleMatch
from syscore_py.shell import DEFAULT_TIMEOUT
from syscore_py.sources.portable import PORTABLE_DEPTH
from syscore_py.sources.start_menu import START_MENU_DEPTH


def test_default_config_path() -> None:
    """default_config_path falls back to ~/.config/syscore/config.yaml."""
    env = {"HOME": str(Path.home())}
    with patch.dict(os.environ, env, clear=True):
        result = default_config_path()
        assert result == Path.home() / ".config" / "syscore" / "config.yaml"


def test_default_config_path_xdg() -> None:
    """default_config_path respects $XDG_CONFIG_HOME."""
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/custom/config"}):
        result = default_config_path()
        assert result == Path("/custom/config/syscore/config.yaml")


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    """Loading a non-existent file returns the default config."""
    cfg = SyscoreConfig.load(tmp_path / "nonexistent.yaml")
    assert cfg.script_path is None
    assert cfg.powershell == "powershell"
    assert cfg.process_timeout == DEFAULT_TIMEOUT
    assert cfg.start_menu_depth == START_MENU_DEPTH
    assert cfg.portable_depth == PORTABLE_DEPTH
    assert cfg.portable_roots == []
    assert cfg.describe_executables is True
    assert cfg.rules == []


def test_empty_file_returns_defaults(tmp_path: Path) -> None:
    """An empty YAML file returns the default config."""
    p = tmp_path / "config.yaml"
    p.write_text("")
    assert SyscoreConfig.from_file(p) == SyscoreConfig()


def test_full_config_parsing(tmp_path: Path) -> None:
    """A fully-populated config file is parsed correctly."""
    p = tmp_path / "config.yaml"
    p.write_text("""\
script_path: "~/scripts/apps.ps1"
powershell: "pwsh"
process_timeout: 12.5
start_menu_depth: 4
portable_depth: 3
portable_roots:
  - "D:/PortableApps"
describe_executables: false
rules:
  - field: name
    match: startswith
    pattern: "uninstall tool"
    action: allow
  - field: install_location
    pattern: "\\\\steamapps\\\\"
""")
    cfg = SyscoreConfig.from_file(p)
    assert cfg.script_path == Path.home() / "scripts" / "apps.ps1"
    assert cfg.powershell == "pwsh"
    assert cfg.process_timeout == 12.5
    assert cfg.start_menu_depth == 4
    assert cfg.portable_depth == 3
    assert cfg.portable_roots == [Path("D:/PortableApps")]
    assert cfg.describe_executables is False
    assert len(cfg.rules) == 2
    assert cfg.rules[0].match is RuleMatch.STARTSWITH
    assert cfg.rules[0].action is RuleAction.ALLOW
    assert cfg.rules[1].field is RuleField.INSTALL_LOCATION
    assert cfg.rules[1].pattern == "\\steamapps\\"
    assert cfg.rules[1].action is RuleAction.REJECT


def test_invalid_rules_skipped(tmp_path: Path) -> None:
    """Malformed rule entries are skipped."""
    p = tmp_path / "config.yaml"
    p.write_text("""\
rules:
  - "just a string"
  - field: colour
    pattern: red
  - field: name
    match: regex
    pattern: "("
  - field: name
    pattern: beta
""")
    cfg = SyscoreConfig.from_file(p)
    assert [r.pattern for r in cfg.rules] == ["beta"]


def test_invalid_numbers_fall_back(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text("""\
process_timeout: -1
start_menu_depth: 0
portable_depth: "deep"
""")
    cfg = SyscoreConfig.from_file(p)
    assert cfg.process_timeout == DEFAULT_TIMEOUT
    assert cfg.start_menu_depth == START_MENU_DEPTH
    assert cfg.portable_depth == PORTABLE_DEPTH


def test_invalid_yaml_returns_defaults(tmp_path: Path) -> None:
    """Unparseable YAML returns the default config."""
    p = tmp_path / "config.yaml"
    p.write_text("rules: [unclosed\n")
    assert SyscoreConfig.from_file(p) == SyscoreConfig()


def test_non_mapping_returns_defaults() -> None:
    assert SyscoreConfig.from_dict(["a", "b"]) == SyscoreConfig()  # type: ignore[arg-type]
