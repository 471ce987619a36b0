"""
Platform detection helpers for Syscore.

Centralizes the Windows specifics (profile layout, system directories) so the
rest of the codebase can call simple functions instead of scattering
environment lookups.
"""

import os
from typing import List, Optional

# Lowercased path fragments of Windows system binary directories.
SYSTEM_DIR_MARKERS = (
    "\\windows\\system32\\",
    "\\windows\\syswow64\\",
    "\\windows\\temp\\",
    "\\windows\\cache\\",
)


def user_profile() -> Optional[str]:
    """Return ``%USERPROFILE%``, or None when it is unset or empty."""
    return os.environ.get("USERPROFILE") or None


def start_menu_programs_dir() -> Optional[str]:
    """Return the current user's Start Menu ``Programs`` directory."""
    profile = user_profile()
    if not profile:
        return None
    return os.path.join(
        profile, "AppData", "Roaming", "Microsoft", "Windows", "Start Menu", "Programs"
    )


def user_data_roots() -> List[str]:
    """Return the per-user application data roots (Local, then Roaming)."""
    profile = user_profile()
    if not profile:
        return []
    return [
        os.path.join(profile, "AppData", "Local"),
        os.path.join(profile, "AppData", "Roaming"),
    ]


def is_system_path(path: str) -> bool:
    """Return True when *path* lies under a Windows system binary directory."""
    lowered = path.lower().replace("/", "\\")
    return any(marker in lowered for marker in SYSTEM_DIR_MARKERS)
