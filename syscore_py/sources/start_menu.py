"""
Start Menu shortcut source for Syscore.

Walks the current user's Start Menu ``Programs`` tree and resolves every
``.lnk`` shortcut through the shell.
"""

import logging
import os
from typing import Iterator, List, Optional

from syscore_py.inventory import CandidateRecord, SourceKind
from syscore_py.inventory.normalize import file_stem, parent_dir, strip_icon_index
from syscore_py.sources import BaseSource, ShellLinkReader, walk_files

logger = logging.getLogger("syscore.sources.start_menu")

START_MENU_DEPTH = 3

# Lowercased target fragments that mark a shortcut as an uninstaller or system tool.
EXCLUDED_TARGET_FRAGMENTS = ("uninstall", "unins000", "system32", "syswow64")


def list_shortcuts(root: Optional[str], max_depth: int = START_MENU_DEPTH) -> List[str]:
    """Return every ``.lnk`` below *root* in walk order."""
    if not root or not os.path.isdir(root):
        return []
    return [
        path for path in walk_files(root, max_depth) if path.lower().endswith(".lnk")
    ]


class StartMenuSource(BaseSource):
    kind = SourceKind.START_MENU_SHORTCUT

    def __init__(
        self,
        root: Optional[str],
        links: ShellLinkReader,
        max_depth: int = START_MENU_DEPTH,
    ):
        self.root = root
        self.links = links
        self.max_depth = max_depth

    def candidates(self) -> Iterator[CandidateRecord]:
        if not self.root or not os.path.isdir(self.root):
            logger.debug(f"Start Menu directory does not exist: {self.root}")
            return
        for lnk_path in list_shortcuts(self.root, self.max_depth):
            record = self._from_shortcut(lnk_path)
            if record is not None:
                yield record

    def _from_shortcut(self, lnk_path: str) -> Optional[CandidateRecord]:
        link = self.links.read(lnk_path)
        if link is None:
            return None

        target = link.target_path.strip()
        lowered = target.lower()
        if not target or any(frag in lowered for frag in EXCLUDED_TARGET_FRAGMENTS):
            logger.debug(f"Skipping shortcut {lnk_path} -> {target!r}")
            return None

        name = link.description.strip() or file_stem(lnk_path) or file_stem(target)

        target_exists = os.path.exists(target)
        working_dir = link.working_directory.strip()
        if target_exists:
            location = parent_dir(target)
        elif working_dir and os.path.exists(working_dir):
            location = working_dir
        else:
            location = ""

        icon = strip_icon_index(link.icon_location)
        if not (icon and os.path.exists(icon)):
            icon = target if target_exists else ""

        return CandidateRecord(
            name=name,
            source=self.kind,
            install_location=location,
            icon_path=icon or None,
        )
