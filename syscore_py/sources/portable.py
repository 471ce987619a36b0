"""
Portable-executable source for Syscore.

Walks the per-user application data directories for executables that were
never registered with an installer.
"""

import logging
import os
from typing import Iterator, List, Optional

from syscore_py.inventory import CandidateRecord, SourceKind
from syscore_py.inventory.normalize import file_stem, parent_dir, spaced_camel_case
from syscore_py.platform import is_system_path
from syscore_py.sources import BaseSource, FileDescriptionReader, walk_files

logger = logging.getLogger("syscore.sources.portable")

PORTABLE_DEPTH = 6

# Skipped only near the top of a root, where they hold OS and cache data.
TOP_LEVEL_SKIP_DIRS = {"microsoft", "packages", "temp", "cache", "crashdumps", "logs"}
# Skipped at any depth.
ALWAYS_SKIP_DIRS = {"temp", "cache", "logs"}


def skip_directory(name: str, depth: int) -> bool:
    """Return True for noisy directories (*name* is lowercased)."""
    if depth <= 1 and (name in TOP_LEVEL_SKIP_DIRS or name.startswith(".")):
        return True
    return name in ALWAYS_SKIP_DIRS


def is_excluded_executable(exe_path: str) -> bool:
    """System binaries, uninstallers and temporary setup programs."""
    if is_system_path(exe_path):
        return True
    stem = file_stem(exe_path).lower()
    if "uninstall" in stem or "unins000" in stem:
        return True
    return stem == "setup" and "temp" in exe_path.lower()


class PortableExecutableSource(BaseSource):
    kind = SourceKind.PORTABLE_EXECUTABLE

    def __init__(
        self,
        roots: List[str],
        describer: Optional[FileDescriptionReader] = None,
        max_depth: int = PORTABLE_DEPTH,
    ):
        self.roots = roots
        self.describer = describer
        self.max_depth = max_depth

    def candidates(self) -> Iterator[CandidateRecord]:
        for root in self.roots:
            if not os.path.isdir(root):
                logger.debug(f"AppData path does not exist: {root}")
                continue
            logger.info(f"Scanning AppData directory: {root}")
            for path in walk_files(root, self.max_depth, skip_directory):
                if not path.lower().endswith(".exe"):
                    continue
                record = self._from_executable(path)
                if record is not None:
                    yield record

    def display_name(self, exe_path: str) -> str:
        """File-description metadata when available, else the spaced file stem."""
        if self.describer is not None:
            description = self.describer.describe(exe_path)
            if description:
                return description
        return spaced_camel_case(file_stem(exe_path))

    def _from_executable(self, exe_path: str) -> Optional[CandidateRecord]:
        if is_excluded_executable(exe_path):
            logger.debug(f"Skipping uninstaller/system executable: {exe_path}")
            return None
        name = self.display_name(exe_path)
        if not name:
            return None
        return CandidateRecord(
            name=name,
            source=self.kind,
            install_location=parent_dir(exe_path),
            icon_path=exe_path,
        )
