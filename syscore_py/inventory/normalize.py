"""
Record normalization for Syscore.

Pure helpers that turn raw source fields into canonical form. Paths are
treated as Windows paths on every host, so ``\\`` and ``/`` both separate
components.
"""

import ntpath
from dataclasses import replace
from typing import Optional

from syscore_py.inventory import CandidateRecord

UNINSTALLER_NAMES = ("uninstall.exe", "unins000.exe")


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _clean_once(location: str) -> str:
    cleaned = _strip_quotes(location.strip())
    if ntpath.basename(cleaned).lower() in UNINSTALLER_NAMES:
        cleaned = ntpath.dirname(cleaned)
    return cleaned


def clean_install_location(raw: Optional[str]) -> str:
    """
    Clean an install location or uninstall command into a directory path.

    Trims whitespace and one pair of surrounding quotes, and replaces a
    trailing ``uninstall.exe``/``unins000.exe`` component with its parent
    directory. The steps repeat until nothing changes, so applying the
    function twice gives the same result as applying it once.

    Args:
        raw: Raw value from a source, possibly None.

    Returns:
        The cleaned path, or an empty string.
    """
    cleaned = raw or ""
    while True:
        step = _clean_once(cleaned)
        if step == cleaned:
            return cleaned
        cleaned = step


def spaced_camel_case(text: str) -> str:
    """Insert a space at every lowercase-to-uppercase transition ("MyApp" -> "My App")."""
    if not text or " " in text or len(text) < 3:
        return text
    chars = []
    for i, ch in enumerate(text):
        if i > 0 and ch.isupper() and text[i - 1].islower():
            chars.append(" ")
        chars.append(ch)
    return "".join(chars)


def strip_icon_index(raw: Optional[str]) -> str:
    """Drop the ``,index`` suffix of a Windows icon location."""
    if not raw:
        return ""
    return raw.split(",", 1)[0].strip().strip('"')


def parent_dir(path: str) -> str:
    return ntpath.dirname(path) if path else ""


def file_stem(path: str) -> str:
    return ntpath.splitext(ntpath.basename(path))[0] if path else ""


def normalize(record: CandidateRecord) -> Optional[CandidateRecord]:
    """
    Return a cleaned copy of *record*, or None if it has no usable name.
    """
    name = (record.name or "").strip()
    if not name:
        return None
    return replace(
        record,
        name=name,
        publisher=(record.publisher or "").strip(),
        display_version=(record.display_version or "").strip(),
        install_location=clean_install_location(record.install_location),
        icon_path=(record.icon_path or "").strip() or None,
        uninstall_command=(record.uninstall_command or "").strip() or None,
    )
