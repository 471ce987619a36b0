"""
Tests for the pywin32-backed shortcut and file-description readers.
"""

from unittest.mock import MagicMock, patch

import pytest

from syscore_py.inventory import SourceUnavailable
from syscore_py.sources.win32 import (
    DEFAULT_TRANSLATION,
    Win32FileDescriber,
    Win32LinkReader,
)


class ComError(Exception):
    pass


def _shortcut(**fields: str) -> MagicMock:
    shortcut = MagicMock()
    shortcut.TargetPath = fields.get("target", "")
    shortcut.Arguments = fields.get("arguments", "")
    shortcut.WorkingDirectory = fields.get("working_directory", "")
    shortcut.IconLocation = fields.get("icon", "")
    shortcut.Description = fields.get("description", "")
    return shortcut


def test_link_reader_reads_and_caches() -> None:
    shell = MagicMock()
    shell.CreateShortcut.return_value = _shortcut(
        target="C:\\Apps\\foo.exe",
        working_directory="C:\\Apps",
        icon="C:\\Apps\\foo.exe,0",
        description="Foo",
    )
    reader = Win32LinkReader(shell, (ComError,))
    link = reader.read("C:\\Start\\Foo.lnk")
    assert link is not None
    assert link.target_path == "C:\\Apps\\foo.exe"
    assert link.working_directory == "C:\\Apps"
    assert link.icon_location == "C:\\Apps\\foo.exe,0"
    assert link.description == "Foo"
    assert link.arguments == ""
    assert reader.read("c:\\start\\foo.lnk") is link
    shell.CreateShortcut.assert_called_once_with("C:\\Start\\Foo.lnk")


def test_link_reader_empty_com_values() -> None:
    shortcut = _shortcut()
    shortcut.Description = None
    shell = MagicMock()
    shell.CreateShortcut.return_value = shortcut
    link = Win32LinkReader(shell, (ComError,)).read("C:\\Start\\Foo.lnk")
    assert link is not None
    assert link.description == ""


def test_link_reader_com_error() -> None:
    shell = MagicMock()
    shell.CreateShortcut.side_effect = ComError("bad link")
    reader = Win32LinkReader(shell, (ComError,))
    assert reader.read("C:\\Start\\Broken.lnk") is None
    assert reader.read("C:\\Start\\Broken.lnk") is None
    assert shell.CreateShortcut.call_count == 1


@patch("syscore_py.sources.win32._wscript_shell")
def test_link_reader_without_pywin32(mock_shell: MagicMock) -> None:
    mock_shell.side_effect = SourceUnavailable("pywin32 is required")
    with pytest.raises(SourceUnavailable):
        Win32LinkReader()


def _api(values: dict) -> MagicMock:
    def version_info(path: str, query: str):
        value = values.get(query)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise ComError(query)
        return value

    api = MagicMock()
    api.GetFileVersionInfo.side_effect = version_info
    return api


def test_describer_uses_translation_table() -> None:
    api = _api(
        {
            "\\VarFileInfo\\Translation": [(0x0409, 0x04E4)],
            "\\StringFileInfo\\040904e4\\FileDescription": "  Fancy Tool ",
        }
    )
    assert Win32FileDescriber(api, (ComError,)).describe("C:\\Apps\\fancy.exe") == "Fancy Tool"


def test_describer_default_translation() -> None:
    api = _api(
        {
            "\\VarFileInfo\\Translation": [],
            f"\\StringFileInfo\\{DEFAULT_TRANSLATION}\\FileDescription": "Fancy Tool",
        }
    )
    assert Win32FileDescriber(api, (ComError,)).describe("C:\\Apps\\fancy.exe") == "Fancy Tool"


def test_describer_tries_each_translation() -> None:
    api = _api(
        {
            "\\VarFileInfo\\Translation": [(0x0407, 0x04B0), (0x0409, 0x04B0)],
            "\\StringFileInfo\\040704b0\\FileDescription": "  ",
            "\\StringFileInfo\\040904b0\\FileDescription": "Fancy Tool",
        }
    )
    assert Win32FileDescriber(api, (ComError,)).describe("C:\\Apps\\fancy.exe") == "Fancy Tool"


def test_describer_without_version_resource() -> None:
    describer = Win32FileDescriber(_api({}), (ComError,))
    assert describer.describe("C:\\Apps\\plain.exe") is None


@patch("syscore_py.sources.win32._win32api")
def test_describer_without_pywin32(mock_api: MagicMock) -> None:
    mock_api.side_effect = SourceUnavailable("pywin32 is required")
    with pytest.raises(SourceUnavailable):
        Win32FileDescriber()
