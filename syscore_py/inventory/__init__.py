"""
Inventory package for Syscore.

This module provides the data model shared by the source adapters and the
inventory pipeline: source kinds and their trust ranks, candidate records,
and the final inventory returned to callers.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SourceUnavailable(RuntimeError):
    """Raised when no baseline access capability can be established at all."""


class SourceKind(Enum):
    """Sources an application observation can come from."""

    CURRENT_USER_REGISTRY = "current_user_registry"
    MACHINE_REGISTRY_64 = "machine_registry_64"
    MACHINE_REGISTRY_32 = "machine_registry_32"
    START_MENU_SHORTCUT = "start_menu_shortcut"
    PORTABLE_EXECUTABLE = "portable_executable"
    SCRIPTED_SOURCE = "scripted_source"

    @property
    def trust(self) -> int:
        """Ordinal trust rank; higher wins identity conflicts."""
        return len(TRUST_ORDER) - TRUST_ORDER.index(self)

    @property
    def label(self) -> str:
        return _LABELS[self]


# Most trusted first. The aggregator consumes sources in exactly this order.
TRUST_ORDER: Tuple[SourceKind, ...] = (
    SourceKind.CURRENT_USER_REGISTRY,
    SourceKind.MACHINE_REGISTRY_64,
    SourceKind.MACHINE_REGISTRY_32,
    SourceKind.START_MENU_SHORTCUT,
    SourceKind.PORTABLE_EXECUTABLE,
    SourceKind.SCRIPTED_SOURCE,
)

_LABELS = {
    SourceKind.CURRENT_USER_REGISTRY: "HKCU",
    SourceKind.MACHINE_REGISTRY_64: "HKLM 64-bit",
    SourceKind.MACHINE_REGISTRY_32: "HKLM 32-bit",
    SourceKind.START_MENU_SHORTCUT: "Start Menu",
    SourceKind.PORTABLE_EXECUTABLE: "AppData",
    SourceKind.SCRIPTED_SOURCE: "PowerShell",
}


@dataclass
class CandidateRecord:
    """One application observation from one source."""

    name: str
    source: SourceKind
    publisher: str = ""
    display_version: str = ""
    install_location: str = ""
    icon_path: Optional[str] = None
    uninstall_command: Optional[str] = None

    @property
    def trust(self) -> int:
        return self.source.trust

    @property
    def has_icon(self) -> bool:
        """True only for an icon location that exists on disk."""
        return bool(self.icon_path) and os.path.exists(self.icon_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "publisher": self.publisher,
            "install_location": self.install_location,
            "display_version": self.display_version,
            "icon_path": self.icon_path or None,
            "uninstall_string": self.uninstall_command or None,
        }


@dataclass
class Inventory:
    """The deduplicated, name-sorted result of one aggregation run."""

    apps: List[CandidateRecord] = field(default_factory=list)
    counts: Dict[SourceKind, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"apps": [app.to_dict() for app in self.apps]}

    def __len__(self) -> int:
        return len(self.apps)
