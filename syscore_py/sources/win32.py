"""
pywin32-backed shell capabilities for Syscore.

Shortcuts are resolved through the ``WScript.Shell`` COM object and file
descriptions are read from the version resource, both in process.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from syscore_py.inventory import SourceUnavailable
from syscore_py.sources import FileDescriptionReader, ShellLink, ShellLinkReader

logger = logging.getLogger("syscore.sources.win32")

# Tried when an executable carries no translation table (US English, Unicode).
DEFAULT_TRANSLATION = "040904b0"


def _pywin32_errors() -> Tuple[type, ...]:
    import pywintypes

    return (pywintypes.error, pywintypes.com_error)


def _wscript_shell() -> Tuple[Any, Tuple[type, ...]]:
    try:
        import win32com.client

        errors = _pywin32_errors()
    except ImportError as e:
        raise SourceUnavailable("pywin32 is required to resolve shortcuts") from e
    return win32com.client.Dispatch("WScript.Shell"), errors


def _win32api() -> Tuple[Any, Tuple[type, ...]]:
    try:
        import win32api

        errors = _pywin32_errors()
    except ImportError as e:
        raise SourceUnavailable("pywin32 is required to read file descriptions") from e
    return win32api, errors


class Win32LinkReader(ShellLinkReader):
    """Resolves ``.lnk`` shortcuts through ``WScript.Shell.CreateShortcut``."""

    def __init__(self, shell: Any = None, errors: Tuple[type, ...] = (OSError,)):
        if shell is None:
            shell, errors = _wscript_shell()
        self._shell = shell
        self._errors = errors
        self._cache: Dict[str, Optional[ShellLink]] = {}

    def read(self, lnk_path: str) -> Optional[ShellLink]:
        # Shared by the Start Menu source and the icon resolver.
        key = lnk_path.lower()
        if key not in self._cache:
            self._cache[key] = self._read(lnk_path)
        return self._cache[key]

    def _read(self, lnk_path: str) -> Optional[ShellLink]:
        try:
            shortcut = self._shell.CreateShortcut(lnk_path)
            return ShellLink(
                target_path=str(shortcut.TargetPath or ""),
                arguments=str(shortcut.Arguments or ""),
                working_directory=str(shortcut.WorkingDirectory or ""),
                icon_location=str(shortcut.IconLocation or ""),
                description=str(shortcut.Description or ""),
            )
        except self._errors as e:
            logger.debug(f"Cannot resolve shortcut {lnk_path}: {e}")
            return None


class Win32FileDescriber(FileDescriptionReader):
    """Reads ``FileDescription`` from the version resource of an executable."""

    def __init__(self, api: Any = None, errors: Tuple[type, ...] = (OSError,)):
        if api is None:
            api, errors = _win32api()
        self._api = api
        self._errors = errors

    def _translations(self, exe_path: str) -> List[str]:
        try:
            pairs = self._api.GetFileVersionInfo(exe_path, "\\VarFileInfo\\Translation")
        except self._errors as e:
            logger.debug(f"No version resource in {exe_path}: {e}")
            return []
        codes = [f"{lang:04x}{codepage:04x}" for lang, codepage in pairs or []]
        return codes or [DEFAULT_TRANSLATION]

    def describe(self, exe_path: str) -> Optional[str]:
        for code in self._translations(exe_path):
            try:
                value = self._api.GetFileVersionInfo(
                    exe_path, f"\\StringFileInfo\\{code}\\FileDescription"
                )
            except self._errors:
                continue
            if value and str(value).strip():
                return str(value).strip()
        return None
