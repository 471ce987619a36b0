"""
Scripted-inventory source for Syscore.

Package managers, packaged (UWP) apps and system tools are listed by an
external script that prints a JSON array of ``{Name, Path, Args, Icon,
Source}`` objects. The script runner is pluggable; the shipped one runs
``apps.ps1`` through PowerShell.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

import orjson

from syscore_py.inventory import CandidateRecord, SourceKind
from syscore_py.inventory.normalize import parent_dir
from syscore_py.shell import DEFAULT_TIMEOUT, ps_quote, run_powershell
from syscore_py.sources import BaseSource, ScriptedEntry, ScriptedInventory, ScriptFailure

logger = logging.getLogger("syscore.sources.scripted")

SCRIPT_NAME = "apps.ps1"
PACKAGED_SOURCES = {"uwp"}
# Icon values this long are inline image data, not paths.
INLINE_ICON_MIN_LENGTH = 200


def default_script_locations() -> List[Path]:
    """Places probed for ``apps.ps1`` when no script path is configured."""
    cwd = Path.cwd()
    locations = [
        cwd / "scripts" / SCRIPT_NAME,
        cwd / "syscore" / "servergo" / "scripts" / SCRIPT_NAME,
    ]
    if sys.argv and sys.argv[0]:
        locations.append(Path(sys.argv[0]).resolve().parent / "scripts" / SCRIPT_NAME)
    return locations


def find_script(configured: Optional[Path] = None) -> Path:
    """
    Locate the inventory script.

    Raises:
        ScriptFailure: If no candidate location holds the script.
    """
    candidates = [configured] if configured else default_script_locations()
    for path in candidates:
        if path.is_file():
            logger.debug(f"Found PowerShell script at: {path}")
            return path
    searched = ", ".join(str(p) for p in candidates)
    raise ScriptFailure(f"PowerShell script {SCRIPT_NAME} not found. Searched in: {searched}")


def parse_entries(output: str) -> List[ScriptedEntry]:
    """
    Parse the script's standard output.

    Raises:
        ScriptFailure: If the output is not a JSON array.
    """
    text = output.strip()
    if not text:
        logger.warning("PowerShell script returned empty output")
        return []
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise ScriptFailure(f"Failed to parse PowerShell script JSON output: {e}") from e
    if not isinstance(data, list):
        raise ScriptFailure("PowerShell script output is not a JSON array")

    entries: List[ScriptedEntry] = []
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get("Name"), str):
            logger.debug(f"Skipping invalid script entry: {item!r}")
            continue
        entries.append(
            ScriptedEntry(
                name=item["Name"],
                path=str(item.get("Path") or ""),
                args=item.get("Args") if isinstance(item.get("Args"), str) else None,
                icon=item.get("Icon") if isinstance(item.get("Icon"), str) else None,
                source=str(item.get("Source") or ""),
            )
        )
    logger.debug(f"Parsed {len(entries)} apps from PowerShell script")
    return entries


class PowerShellScriptInventory(ScriptedInventory):
    """Runs ``apps.ps1`` with UTF-8 console output and a timeout."""

    def __init__(
        self,
        script_path: Optional[Path] = None,
        powershell: str = "powershell",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.script_path = script_path
        self.powershell = powershell
        self.timeout = timeout

    def entries(self) -> List[ScriptedEntry]:
        script = find_script(self.script_path)
        command = (
            "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
            f"& {ps_quote(str(script))}"
        )
        returncode, stdout, stderr = run_powershell(command, self.powershell, self.timeout)
        if returncode != 0:
            raise ScriptFailure(
                f"PowerShell script exited with code {returncode}: {stderr.strip()}"
            )
        return parse_entries(stdout)


def is_inline_icon(icon: str) -> bool:
    return icon.startswith("data:") or len(icon) > INLINE_ICON_MIN_LENGTH


def pick_icon(entry: ScriptedEntry) -> Optional[str]:
    """Usable icon path for *entry*; the executable stands in for inline image data."""
    exe = entry.path if entry.path.lower().endswith(".exe") else None
    if entry.icon and not is_inline_icon(entry.icon) and os.path.exists(entry.icon):
        return entry.icon
    return exe


class ScriptedSource(BaseSource):
    kind = SourceKind.SCRIPTED_SOURCE

    def __init__(self, inventory: ScriptedInventory):
        self.inventory = inventory

    def candidates(self) -> Iterator[CandidateRecord]:
        for entry in self.inventory.entries():
            if entry.source.lower() in PACKAGED_SOURCES:
                # Packaged apps have no directory; the launch arguments identify them.
                location = entry.args or ""
            else:
                location = parent_dir(entry.path)
            yield CandidateRecord(
                name=entry.name,
                source=self.kind,
                install_location=location,
                icon_path=pick_icon(entry),
            )
