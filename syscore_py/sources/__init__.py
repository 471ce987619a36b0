"""
Source package for Syscore.

This module provides the base class for source adapters and the capability
interfaces they read through (registry, shell links, file metadata, scripted
inventory). Each adapter turns one raw external source into a stream of
candidate records.
"""

import abc
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional

from syscore_py.inventory import CandidateRecord, SourceKind

logger = logging.getLogger("syscore.sources")


class SourceError(Exception):
    """A whole source failed; it contributes no further candidates."""


class ScriptFailure(SourceError):
    """The scripted inventory could not be run or its output could not be read."""


class BaseSource(abc.ABC):
    """Base class for source adapters."""

    kind: SourceKind

    @abc.abstractmethod
    def candidates(self) -> Iterator[CandidateRecord]:
        """
        Yield candidate records from this source.

        Raises:
            SourceError: If the source as a whole cannot be read.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.label})"


class RegistryReader(abc.ABC):
    """Key-value registry capability. Missing keys and values are None, not errors."""

    @abc.abstractmethod
    def open_key(self, hive: str, path: str, view: Optional[str] = None) -> Optional[Any]:
        """
        Open *path* under *hive* ("HKCU" or "HKLM").

        Args:
            hive: Registry hive name
            path: Key path below the hive
            view: "64" or "32" to pick a registry view, None for the default

        Returns:
            An opaque handle, or None if the key cannot be opened
        """
        pass

    @abc.abstractmethod
    def subkeys(self, handle: Any) -> List[str]:
        """List the names of the subkeys of *handle*."""
        pass

    @abc.abstractmethod
    def open_subkey(self, handle: Any, name: str) -> Optional[Any]:
        pass

    @abc.abstractmethod
    def get_string(self, handle: Any, field: str) -> Optional[str]:
        pass

    def close(self, handle: Any) -> None:
        pass


@dataclass
class ShellLink:
    """Resolved properties of a ``.lnk`` shortcut."""

    target_path: str = ""
    arguments: str = ""
    working_directory: str = ""
    icon_location: str = ""
    description: str = ""


class ShellLinkReader(abc.ABC):
    @abc.abstractmethod
    def read(self, lnk_path: str) -> Optional[ShellLink]:
        """Resolve a shortcut, or return None when the shell has no data for it."""
        pass


class FileDescriptionReader(abc.ABC):
    @abc.abstractmethod
    def describe(self, exe_path: str) -> Optional[str]:
        """Return the file-description metadata of an executable, if any."""
        pass


@dataclass
class ScriptedEntry:
    """One ``{Name, Path, Args, Icon, Source}`` object from the scripted inventory."""

    name: str
    path: str = ""
    args: Optional[str] = None
    icon: Optional[str] = None
    source: str = ""


class ScriptedInventory(abc.ABC):
    """Pluggable listing of package-manager, packaged and system applications."""

    @abc.abstractmethod
    def entries(self) -> List[ScriptedEntry]:
        """
        Run the inventory.

        Raises:
            ScriptFailure: On a missing script, non-zero exit, timeout or
                malformed output.
        """
        pass


def walk_files(
    root: str,
    max_depth: int,
    skip_dir: Optional[Callable[[str, int], bool]] = None,
    depth: int = 0,
) -> Iterator[str]:
    """
    Depth-first walk yielding file paths below *root*.

    Directories at depth ``0 .. max_depth - 1`` are listed, in sorted order.
    An unreadable directory is logged and skipped without aborting the walk.

    Args:
        root: Directory to walk
        max_depth: Recursion bound
        skip_dir: Called with (lowercased directory name, depth of the
            directory being listed); return True to skip that subdirectory
        depth: Depth of *root*
    """
    if depth >= max_depth:
        return
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Cannot read directory {root}: {e}")
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            if skip_dir and skip_dir(entry.name.lower(), depth):
                logger.debug(f"Skipping directory: {entry.path}")
                continue
            yield from walk_files(entry.path, max_depth, skip_dir, depth + 1)
        else:
            yield entry.path
