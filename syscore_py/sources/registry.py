"""
Registry-uninstall sources for Syscore.

Enumerates the Uninstall keys of the current user and of both machine-wide
registry views.
"""

import logging
import os
from typing import Any, Iterator, List, Optional

from syscore_py.inventory import CandidateRecord, SourceKind, SourceUnavailable
from syscore_py.inventory.normalize import clean_install_location, strip_icon_index
from syscore_py.sources import BaseSource, RegistryReader

logger = logging.getLogger("syscore.sources.registry")

UNINSTALL_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
UNINSTALL_KEY_32 = r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"


class WinRegistry(RegistryReader):
    """RegistryReader over the standard-library ``winreg`` module."""

    def __init__(self) -> None:
        try:
            import winreg
        except ImportError as e:
            raise SourceUnavailable("The Windows registry is not available on this host") from e
        self._winreg = winreg
        self._hives = {
            "HKCU": winreg.HKEY_CURRENT_USER,
            "HKLM": winreg.HKEY_LOCAL_MACHINE,
        }
        self._views = {
            "64": winreg.KEY_WOW64_64KEY,
            "32": winreg.KEY_WOW64_32KEY,
        }

    def open_key(self, hive: str, path: str, view: Optional[str] = None) -> Optional[Any]:
        access = self._winreg.KEY_READ | self._views.get(view or "", 0)
        try:
            return self._winreg.OpenKey(self._hives[hive], path, 0, access)
        except OSError:
            return None

    def subkeys(self, handle: Any) -> List[str]:
        names: List[str] = []
        try:
            count = self._winreg.QueryInfoKey(handle)[0]
        except OSError:
            return names
        for idx in range(count):
            try:
                names.append(self._winreg.EnumKey(handle, idx))
            except OSError:
                continue
        return names

    def open_subkey(self, handle: Any, name: str) -> Optional[Any]:
        try:
            return self._winreg.OpenKey(handle, name)
        except OSError:
            return None

    def get_string(self, handle: Any, field: str) -> Optional[str]:
        try:
            value, _ = self._winreg.QueryValueEx(handle, field)
        except OSError:
            return None
        return value if isinstance(value, str) else None

    def close(self, handle: Any) -> None:
        handle.Close()


class RegistryUninstallSource(BaseSource):
    """Turns the subkeys of one Uninstall root into candidate records."""

    def __init__(
        self,
        kind: SourceKind,
        reader: RegistryReader,
        hive: str,
        path: str = UNINSTALL_KEY,
        view: Optional[str] = None,
    ):
        self.kind = kind
        self.reader = reader
        self.hive = hive
        self.path = path
        self.view = view

    def candidates(self) -> Iterator[CandidateRecord]:
        root = self.reader.open_key(self.hive, self.path, self.view)
        if root is None:
            logger.warning(f"Could not open {self.hive}\\{self.path} registry key")
            return
        try:
            for name in self.reader.subkeys(root):
                handle = self.reader.open_subkey(root, name)
                if handle is None:
                    logger.debug(f"Cannot open uninstall subkey {name}")
                    continue
                try:
                    record = self._read_entry(handle)
                finally:
                    self.reader.close(handle)
                if record is not None:
                    yield record
        finally:
            self.reader.close(root)

    def _value(self, handle: Any, field: str) -> str:
        return (self.reader.get_string(handle, field) or "").strip()

    def _read_entry(self, handle: Any) -> Optional[CandidateRecord]:
        name = self._value(handle, "DisplayName")
        if not name:
            return None

        uninstall = self._value(handle, "UninstallString")
        explicit = self._value(handle, "InstallLocation")
        location = resolve_install_location(explicit, uninstall)

        icon = strip_icon_index(self._value(handle, "DisplayIcon"))
        icon_path = icon if icon and os.path.exists(icon) else None

        return CandidateRecord(
            name=name,
            source=self.kind,
            publisher=self._value(handle, "Publisher"),
            display_version=self._value(handle, "DisplayVersion"),
            install_location=location,
            icon_path=icon_path,
            uninstall_command=uninstall or None,
        )


def resolve_install_location(explicit: str, uninstall: str) -> str:
    """
    Pick an install location from an uninstall entry.

    The explicit field wins; without one the uninstall command stands in. If
    the cleaned result does not exist, the cleaning is retried on the raw
    uninstall command and that result is used when it exists.
    """
    location = clean_install_location(explicit or uninstall)
    if not location or not os.path.exists(location):
        if uninstall:
            cleaned = clean_install_location(uninstall)
            if cleaned and os.path.exists(cleaned):
                location = cleaned
    return location


def uninstall_sources(reader: RegistryReader) -> List[RegistryUninstallSource]:
    """The three Uninstall roots, most trusted first."""
    return [
        RegistryUninstallSource(SourceKind.CURRENT_USER_REGISTRY, reader, "HKCU"),
        RegistryUninstallSource(SourceKind.MACHINE_REGISTRY_64, reader, "HKLM", UNINSTALL_KEY, "64"),
        RegistryUninstallSource(SourceKind.MACHINE_REGISTRY_32, reader, "HKLM", UNINSTALL_KEY_32),
    ]
