"""
Icon resolution for Syscore.

Back-fills the icon location of accepted records through a chain of
strategies; the first one that finds an existing file wins.
"""

import logging
import os
from typing import Iterable, List, Optional

from syscore_py.inventory import CandidateRecord
from syscore_py.inventory.normalize import file_stem, strip_icon_index
from syscore_py.sources import ShellLinkReader
from syscore_py.sources.start_menu import START_MENU_DEPTH, list_shortcuts

logger = logging.getLogger("syscore.icons")


def shortcut_matches(app_name: str, shortcut_stem: str) -> bool:
    """
    Loose match between an application name and a shortcut file name.

    Any of the first three words of the name inside the shortcut name, the
    whole name inside it, or a shortcut name starting with the first five
    characters of the name.
    """
    name = app_name.lower()
    stem = shortcut_stem.lower()
    terms = name.split()[:3]
    if not terms:
        return False
    if any(term in stem for term in terms) or name in stem:
        return True
    return len(name) > 3 and stem.startswith(name[:5])


def _executables(directory: str) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Cannot read install location {directory}: {e}")
        return []
    result = []
    for entry in entries:
        try:
            if entry.is_file() and entry.name.lower().endswith(".exe"):
                result.append(entry)
        except OSError:
            continue
    return result


class IconResolver:
    """Resolves icon locations for records that arrived without one."""

    def __init__(
        self,
        start_menu_root: Optional[str],
        links: Optional[ShellLinkReader],
        max_depth: int = START_MENU_DEPTH,
    ):
        self.start_menu_root = start_menu_root
        self.links = links
        self.max_depth = max_depth
        self._shortcuts: Optional[List[str]] = None

    @property
    def shortcuts(self) -> List[str]:
        if self._shortcuts is None:
            self._shortcuts = list_shortcuts(self.start_menu_root, self.max_depth)
        return self._shortcuts

    def resolve_all(self, records: Iterable[CandidateRecord]) -> int:
        """
        Fill ``icon_path`` on every record lacking one.

        Returns:
            Number of records that gained an icon
        """
        resolved = 0
        for record in records:
            if record.has_icon:
                continue
            icon = self.resolve(record)
            if icon:
                record.icon_path = icon
                resolved += 1
        logger.debug(f"Resolved icons for {resolved} apps")
        return resolved

    def resolve(self, record: CandidateRecord) -> Optional[str]:
        if record.has_icon:
            return record.icon_path
        return (
            self.from_start_menu(record.name)
            or self.from_install_location(record.name, record.install_location)
        )

    def from_start_menu(self, app_name: str) -> Optional[str]:
        if self.links is None:
            return None
        for lnk_path in self.shortcuts:
            if not shortcut_matches(app_name, file_stem(lnk_path)):
                continue
            link = self.links.read(lnk_path)
            if link is None:
                continue
            icon = strip_icon_index(link.icon_location)
            if icon and os.path.exists(icon):
                return icon
            target = link.target_path.strip()
            if target and os.path.exists(target):
                return target
        return None

    def from_install_location(self, app_name: str, location: str) -> Optional[str]:
        """Best-named executable in *location*, else the first executable found."""
        if not location or not os.path.isdir(location):
            return None
        executables = _executables(location)
        if not executables:
            return None
        name = app_name.lower()
        terms = name.split()[:2]
        joined = name.replace(" ", "") + ".exe"
        for entry in executables:
            file_name = entry.name.lower()
            if any(term in file_name for term in terms) or file_name == joined:
                return entry.path
        return executables[0].path
