"""
Tests for icon resolution.
"""

from pathlib import Path
from typing import Dict, List, Optional

from syscore_py.inventory import CandidateRecord, SourceKind
from syscore_py.inventory.icons import IconResolver, shortcut_matches
from syscore_py.sources import ShellLink, ShellLinkReader


class RecordingLinks(ShellLinkReader):
    def __init__(self, links: Dict[str, ShellLink]):
        self.links = links
        self.reads: List[str] = []

    def read(self, lnk_path: str) -> Optional[ShellLink]:
        self.reads.append(lnk_path)
        return self.links.get(lnk_path)


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"MZ")
    return path


def _record(name: str, location: str = "", icon: Optional[str] = None) -> CandidateRecord:
    return CandidateRecord(
        name=name,
        source=SourceKind.MACHINE_REGISTRY_64,
        install_location=location,
        icon_path=icon,
    )


def test_shortcut_matches() -> None:
    assert shortcut_matches("Visual Studio Code", "Visual Studio Code")
    assert shortcut_matches("Mozilla Firefox", "Firefox")
    assert shortcut_matches("Notepad++", "Notepad++ (64-bit)")
    assert shortcut_matches("Blenderx", "Blende Launcher")
    assert not shortcut_matches("Widget", "Gadget")
    assert not shortcut_matches("", "Anything")


def test_install_location_exact_executable(tmp_path: Path) -> None:
    exe = _touch(tmp_path / "Bar" / "Bar.exe")
    _touch(tmp_path / "Bar" / "Alpha.exe")
    record = _record("Bar", str(tmp_path / "Bar"))
    resolver = IconResolver(None, None)
    assert resolver.resolve_all([record]) == 1
    assert record.icon_path == str(exe)


def test_install_location_joined_name(tmp_path: Path) -> None:
    _touch(tmp_path / "App" / "aaa.exe")
    exe = _touch(tmp_path / "App" / "coolapp.exe")
    resolver = IconResolver(None, None)
    # "cool" appears in the file name.
    assert resolver.from_install_location("Cool App", str(tmp_path / "App")) == str(exe)


def test_install_location_first_executable_fallback(tmp_path: Path) -> None:
    first = _touch(tmp_path / "App" / "launcher.exe")
    _touch(tmp_path / "App" / "zeta.exe")
    _touch(tmp_path / "App" / "readme.txt")
    resolver = IconResolver(None, None)
    assert resolver.from_install_location("Widget", str(tmp_path / "App")) == str(first)


def test_install_location_without_executables(tmp_path: Path) -> None:
    _touch(tmp_path / "App" / "readme.txt")
    resolver = IconResolver(None, None)
    assert resolver.from_install_location("Widget", str(tmp_path / "App")) is None
    assert resolver.from_install_location("Widget", str(tmp_path / "Missing")) is None
    assert resolver.from_install_location("Widget", "") is None


def test_start_menu_icon_location_wins(tmp_path: Path) -> None:
    root = tmp_path / "Programs"
    lnk = _touch(root / "Widget Pro.lnk")
    icon = _touch(tmp_path / "icons" / "widget.ico")
    target = _touch(tmp_path / "Widget" / "widget.exe")
    links = RecordingLinks(
        {str(lnk): ShellLink(target_path=str(target), icon_location=f"{icon},0")}
    )
    record = _record("Widget", str(tmp_path / "Widget"))
    IconResolver(str(root), links).resolve_all([record])
    assert record.icon_path == str(icon)


def test_start_menu_target_when_icon_missing(tmp_path: Path) -> None:
    root = tmp_path / "Programs"
    lnk = _touch(root / "Widget.lnk")
    target = _touch(tmp_path / "Widget" / "widget.exe")
    links = RecordingLinks(
        {str(lnk): ShellLink(target_path=str(target), icon_location="C:\\gone.ico,0")}
    )
    resolver = IconResolver(str(root), links)
    assert resolver.resolve(_record("Widget")) == str(target)


def test_existing_icon_is_kept(tmp_path: Path) -> None:
    root = tmp_path / "Programs"
    _touch(root / "Widget.lnk")
    icon = _touch(tmp_path / "widget.ico")
    links = RecordingLinks({})
    record = _record("Widget", icon=str(icon))
    resolver = IconResolver(str(root), links)
    assert resolver.resolve_all([record]) == 0
    assert record.icon_path == str(icon)
    assert links.reads == []


def test_unresolved_record_keeps_no_icon(tmp_path: Path) -> None:
    record = _record("Widget", str(tmp_path / "Missing"))
    assert IconResolver(str(tmp_path / "Programs"), RecordingLinks({})).resolve_all([record]) == 0
    assert record.icon_path is None


def test_shortcut_list_is_cached(tmp_path: Path) -> None:
    root = tmp_path / "Programs"
    _touch(root / "One.lnk")
    resolver = IconResolver(str(root), RecordingLinks({}))
    assert len(resolver.shortcuts) == 1
    _touch(root / "Two.lnk")
    assert len(resolver.shortcuts) == 1
