"""
Tests for the PowerShell integration.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from syscore_py.shell import ps_quote, run_powershell
from syscore_py.sources import ScriptFailure


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def test_ps_quote() -> None:
    assert ps_quote("C:\\Apps\\Foo.lnk") == "'C:\\Apps\\Foo.lnk'"
    assert ps_quote("O'Brien") == "'O''Brien'"


@patch("syscore_py.shell.subprocess.run")
def test_run_powershell(mock_run: MagicMock) -> None:
    mock_run.return_value = _completed(0, "out", "err")
    assert run_powershell("Get-Date", "pwsh", timeout=7.0) == (0, "out", "err")
    args, kwargs = mock_run.call_args
    cmd = args[0]
    assert cmd[0] == "pwsh"
    assert cmd[-2:] == ["-Command", "Get-Date"]
    assert "-NoProfile" in cmd
    assert kwargs["timeout"] == 7.0
    assert kwargs["capture_output"] is True


@patch("syscore_py.shell.subprocess.run")
def test_run_powershell_timeout(mock_run: MagicMock) -> None:
    mock_run.side_effect = subprocess.TimeoutExpired(cmd="powershell", timeout=1.0)
    with pytest.raises(ScriptFailure, match="timed out"):
        run_powershell("Start-Sleep 10", timeout=1.0)


@patch("syscore_py.shell.subprocess.run")
def test_run_powershell_missing_executable(mock_run: MagicMock) -> None:
    mock_run.side_effect = FileNotFoundError("powershell")
    with pytest.raises(ScriptFailure, match="not found"):
        run_powershell("Get-Date")
